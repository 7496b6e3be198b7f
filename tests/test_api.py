"""Tests for the content API client (Layer 1)."""

import asyncio
from unittest.mock import MagicMock

import pytest
import requests

from segment_studio.api import ContentApiClient
from segment_studio.errors import ApiError, ApiUnavailableError, AuthenticationRequiredError
from segment_studio.models import PendingSegment

AUDIO = {"id": "aud1", "title": "Episode", "segmentPublicIds": ["a", "b"], "segmentUrls": ["u/a", "u/b"]}


def _response(status=200, payload=None, content=b"{}"):
    resp = MagicMock()
    resp.status_code = status
    resp.content = content
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def _client(resp=None, token="tok"):
    session = MagicMock()
    session.request.return_value = resp if resp is not None else _response(payload={"audio": AUDIO})
    client = ContentApiClient(base_url="http://api.test/api/", token=lambda: token, session=session)
    return client, session


def test_get_audio_sends_bearer_token():
    """Authorization header carries the injected token."""
    client, session = _client()
    artifact = asyncio.run(client.get_audio("aud1"))
    method, url = session.request.call_args.args
    assert method == "GET"
    assert url == "http://api.test/api/audio/aud1"
    assert session.request.call_args.kwargs["headers"] == {"Authorization": "Bearer tok"}
    assert artifact.segment_public_ids == ["a", "b"]


def test_missing_token_fails_before_request():
    """No credential → AuthenticationRequiredError, nothing sent."""
    client, session = _client(token=None)
    with pytest.raises(AuthenticationRequiredError):
        asyncio.run(client.get_audio("aud1"))
    session.request.assert_not_called()


def test_append_segments_multipart_under_one_field():
    """Every part goes under the repeated `segments` field, in queue order."""
    client, session = _client()
    segments = [
        PendingSegment(filename="one.mp3", data=b"1", content_type="audio/mpeg"),
        PendingSegment(filename="recording_1.webm", data=b"2", content_type="audio/webm"),
    ]
    asyncio.run(client.append_segments("aud1", segments))
    kwargs = session.request.call_args.kwargs
    assert session.request.call_args.args == ("POST", "http://api.test/api/audio/aud1/segments")
    assert kwargs["files"] == [
        ("segments", ("one.mp3", b"1", "audio/mpeg")),
        ("segments", ("recording_1.webm", b"2", "audio/webm")),
    ]
    assert kwargs["json"] is None


def test_reorder_sends_complete_list():
    """PATCH body holds the whole proposed order."""
    client, session = _client()
    asyncio.run(client.reorder_segments("aud1", ["b", "a"], ["u/b", "u/a"]))
    assert session.request.call_args.args == ("PATCH", "http://api.test/api/audio/aud1/segments/reorder")
    assert session.request.call_args.kwargs["json"] == {
        "segmentPublicIds": ["b", "a"],
        "segmentUrls": ["u/b", "u/a"],
    }


def test_remove_segment_body():
    """DELETE identifies one publicId in a JSON body."""
    client, session = _client()
    asyncio.run(client.remove_segment("aud1", "b"))
    assert session.request.call_args.args == ("DELETE", "http://api.test/api/audio/aud1/segments")
    assert session.request.call_args.kwargs["json"] == {"publicId": "b"}


def test_merge_posts_without_body():
    """Merge is a bodiless POST."""
    client, session = _client()
    asyncio.run(client.merge_segments("aud1"))
    assert session.request.call_args.args == ("POST", "http://api.test/api/audio/aud1/publish-merge")
    assert session.request.call_args.kwargs["json"] is None
    assert session.request.call_args.kwargs["files"] is None


def test_list_chapters_includes_unpublished():
    """Sibling listing asks for unpublished units too."""
    payload = {"chapters": [{"id": "c1", "order": 1}, {"id": "c3", "order": 3}]}
    client, session = _client(_response(payload=payload))
    units = asyncio.run(client.list_chapters("aud1"))
    assert session.request.call_args.kwargs["params"] == {"includeUnpublished": "true"}
    assert [u.order for u in units] == [1, 3]
    assert units[0].parent_id == "aud1"


def test_list_chapter_parts_path():
    """Parts inside a chapter use the chapter-scoped route."""
    client, session = _client(_response(payload={"parts": []}))
    assert asyncio.run(client.list_chapter_parts("ch9")) == []
    assert session.request.call_args.args[1] == "http://api.test/api/audio/chapters/ch9/parts"


def test_create_part_in_chapter():
    """Chapter-scoped part creation posts to the chapter route."""
    payload = {"part": {"id": "p1", "order": 2, "title": "Two"}}
    client, session = _client(_response(payload=payload))
    unit = asyncio.run(client.create_part("aud1", {"title": "Two", "order": 2}, chapter_id="ch9"))
    assert session.request.call_args.args == ("POST", "http://api.test/api/audio/chapters/ch9/parts")
    assert unit.order == 2
    assert unit.parent_id == "ch9"


def test_error_uses_server_message():
    """Non-2xx raises ApiError with the server's message and status."""
    client, _ = _client(_response(status=409, payload={"message": "Chapter order already exists"}))
    with pytest.raises(ApiError, match="order already exists") as excinfo:
        asyncio.run(client.list_chapters("aud1"))
    assert excinfo.value.status_code == 409


def test_error_without_json_body():
    """Non-JSON error bodies fall back to the status line."""
    client, _ = _client(_response(status=502, payload=ValueError("no json"), content=b"<html>"))
    with pytest.raises(ApiError, match="failed with status 502"):
        asyncio.run(client.get_audio("aud1"))


def test_transport_failure_is_unavailable():
    """Connection problems raise ApiUnavailableError."""
    client, session = _client()
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(ApiUnavailableError):
        asyncio.run(client.get_audio("aud1"))


def test_success_without_artifact_is_an_error():
    """A mutating call must echo the artifact."""
    client, _ = _client(_response(status=204, payload=None, content=b""))
    with pytest.raises(ApiError):
        asyncio.run(client.merge_segments("aud1"))
