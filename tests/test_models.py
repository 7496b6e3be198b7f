"""Tests for data models (Layer 0)."""

import pytest

from segment_studio.models import AudioArtifact, OrderedUnit, PendingSegment, RecordingSession
from segment_studio import constants


def test_artifact_from_wrapped_payload():
    """{"audio": {...}} bodies are unwrapped."""
    artifact = AudioArtifact.from_api({
        "audio": {
            "id": "aud1",
            "title": "Episode",
            "status": "PUBLISHED",
            "fileUrl": "https://cdn.test/full.mp3",
            "segmentPublicIds": ["a", "b"],
            "segmentUrls": ["u/a", "u/b"],
        }
    })
    assert artifact.id == "aud1"
    assert artifact.status == "PUBLISHED"
    assert artifact.file_url == "https://cdn.test/full.mp3"
    assert artifact.segment_public_ids == ["a", "b"]
    assert artifact.segment_urls == ["u/a", "u/b"]


def test_artifact_from_bare_payload_defaults():
    """Bare bodies work and missing lists default to empty."""
    artifact = AudioArtifact.from_api({"id": 7})
    assert artifact.id == "7"
    assert artifact.segment_public_ids == []
    assert artifact.file_url is None


def test_artifact_from_payload_without_id():
    """A body with no artifact is rejected."""
    with pytest.raises(ValueError):
        AudioArtifact.from_api({"message": "ok"})


def test_artifact_equality_ignores_raw():
    """Server timestamps in raw don't affect equivalence."""
    a = AudioArtifact.from_api({"id": "x", "fileUrl": "f", "updatedAt": "1"})
    b = AudioArtifact.from_api({"id": "x", "fileUrl": "f", "updatedAt": "2"})
    assert a == b


def test_ordered_unit_from_api():
    """Order and parent are read from listing entries."""
    unit = OrderedUnit.from_api({"id": "c1", "order": 3, "title": "Intro", "audioId": "aud1"})
    assert unit.order == 3
    assert unit.parent_id == "aud1"
    fallback = OrderedUnit.from_api({"id": "c2", "order": 1}, parent_id="aud9")
    assert fallback.parent_id == "aud9"
    part = OrderedUnit.from_api({"id": "p1", "order": 2, "audioId": "aud1", "chapterId": "ch1"})
    assert part.parent_id == "ch1"


def test_defaults():
    """Dataclass defaults."""
    assert PendingSegment(filename="a.mp3", data=b"").content_type == "audio/mpeg"
    session = RecordingSession()
    assert session.active is False
    assert session.elapsed_seconds == 0
    assert session.captured is None


def test_constants_exist():
    """Module-level constants are defined."""
    for name in [
        "API_BASE_URL", "SESSION_FILE", "HTTP_TIMEOUT", "SEGMENT_FIELD",
        "RECORDING_TICK_SECONDS", "CAPTURE_CHUNK_MS", "CAPTURE_FORMATS",
        "MIME_TYPES", "STATUS_CLEAR_SECONDS", "FIRST_ORDER", "VERSION",
    ]:
        assert hasattr(constants, name), f"Missing constant: {name}"
