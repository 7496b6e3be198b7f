"""Shared fixtures for segment studio tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from segment_studio.capture import CaptureDevice
from segment_studio.errors import CaptureError
from segment_studio.models import AudioArtifact, PendingSegment


class FakeDevice(CaptureDevice):
    """In-memory capture device: one chunk per tick, a tail on stop."""

    content_type = "audio/webm"
    extension = ".webm"

    def __init__(self, deny=False, fail_on_stop=False):
        self.deny = deny
        self.fail_on_stop = fail_on_stop
        self.open = False
        self.requests = 0
        self.releases = 0

    async def request_capture(self):
        self.requests += 1
        if self.deny:
            raise CaptureError("Permission denied")
        self.open = True

    def read_chunk(self):
        return b"chunk;" if self.open else b""

    async def stop_capture(self):
        if self.fail_on_stop:
            raise CaptureError("Device lost")
        self.release()
        return b"tail"

    def release(self):
        self.open = False
        self.releases += 1


@pytest.fixture
def fake_device():
    return FakeDevice()


def make_artifact(ids=("a", "b", "c"), **kwargs):
    """Artifact with matching public ids and URLs."""
    ids = list(ids)
    return AudioArtifact(
        id=kwargs.pop("id", "aud1"),
        title=kwargs.pop("title", "Episode"),
        segment_public_ids=ids,
        segment_urls=[f"https://cdn.test/{i}.webm" for i in ids],
        **kwargs,
    )


@pytest.fixture
def artifact():
    return make_artifact()


@pytest.fixture
def fake_api(artifact):
    """API double whose coroutines default to echoing the artifact."""
    api = MagicMock()
    api.get_audio = AsyncMock(return_value=artifact)
    api.append_segments = AsyncMock()
    api.reorder_segments = AsyncMock()
    api.remove_segment = AsyncMock()
    api.merge_segments = AsyncMock()
    api.list_chapters = AsyncMock(return_value=[])
    api.list_parts = AsyncMock(return_value=[])
    api.list_chapter_parts = AsyncMock(return_value=[])
    api.create_chapter = AsyncMock()
    api.create_part = AsyncMock()
    return api


@pytest.fixture
def pending():
    return [
        PendingSegment(filename="one.mp3", data=b"111", content_type="audio/mpeg"),
        PendingSegment(filename="two.wav", data=b"222", content_type="audio/wav"),
    ]
