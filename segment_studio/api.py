"""Client for the remote content API.

Every mutating call returns the whole updated parent object; callers adopt
it as-is. Blocking requests run in a worker thread so the event loop stays
responsive.
"""

import asyncio
import json
import logging
from typing import Callable

import requests

from segment_studio.constants import API_BASE_URL, HTTP_TIMEOUT, SEGMENT_FIELD
from segment_studio.errors import ApiError, ApiUnavailableError, AuthenticationRequiredError
from segment_studio.models import AudioArtifact, OrderedUnit, PendingSegment

logger = logging.getLogger(__name__)


class ContentApiClient:
    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: Callable[[], str | None] | None = None,
        timeout: float = HTTP_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token or (lambda: None)
        self.timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        token = self._token()
        if not token:
            raise AuthenticationRequiredError("Authentication required")
        return {"Authorization": f"Bearer {token}"}

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict | None = None,
        json_body: dict | None = None,
        files: list | None = None,
    ) -> dict:
        url = f"{self.base_url}{path}"
        headers = self._headers()
        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(
                method,
                url,
                headers=headers,
                params=params,
                json=json_body,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ApiUnavailableError(f"Failed to contact content API at {self.base_url}") from exc

        if not 200 <= resp.status_code < 300:
            raise ApiError(_error_message(resp, method, path), status_code=resp.status_code)

        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except (json.JSONDecodeError, ValueError) as exc:
            raise ApiError(f"Content API returned invalid JSON for {method} {path}") from exc

    async def _call(self, method: str, path: str, **kwargs) -> dict:
        return await asyncio.to_thread(self._request, method, path, **kwargs)

    async def _artifact_call(self, method: str, path: str, **kwargs) -> AudioArtifact:
        payload = await self._call(method, path, **kwargs)
        try:
            return AudioArtifact.from_api(payload)
        except ValueError as exc:
            raise ApiError(f"{method} {path}: {exc}") from exc

    # --- Audio artifact and its segment list ---

    async def get_audio(self, audio_id: str) -> AudioArtifact:
        return await self._artifact_call("GET", f"/audio/{audio_id}")

    async def append_segments(self, audio_id: str, segments: list[PendingSegment]) -> AudioArtifact:
        files = [
            (SEGMENT_FIELD, (seg.filename, seg.data, seg.content_type))
            for seg in segments
        ]
        return await self._artifact_call("POST", f"/audio/{audio_id}/segments", files=files)

    async def reorder_segments(
        self,
        audio_id: str,
        public_ids: list[str],
        urls: list[str] | None = None,
    ) -> AudioArtifact:
        body = {"segmentPublicIds": list(public_ids)}
        if urls is not None:
            body["segmentUrls"] = list(urls)
        return await self._artifact_call("PATCH", f"/audio/{audio_id}/segments/reorder", json_body=body)

    async def remove_segment(self, audio_id: str, public_id: str) -> AudioArtifact:
        return await self._artifact_call(
            "DELETE", f"/audio/{audio_id}/segments", json_body={"publicId": public_id}
        )

    async def merge_segments(self, audio_id: str) -> AudioArtifact:
        return await self._artifact_call("POST", f"/audio/{audio_id}/publish-merge")

    # --- Ordered units (chapters, parts) ---

    async def _list_units(self, path: str, key: str, parent_id: str, include_unpublished: bool) -> list[OrderedUnit]:
        params = {"includeUnpublished": "true"} if include_unpublished else None
        payload = await self._call("GET", path, params=params)
        return [OrderedUnit.from_api(item, parent_id) for item in payload.get(key) or []]

    async def list_chapters(self, audio_id: str, include_unpublished: bool = True) -> list[OrderedUnit]:
        return await self._list_units(f"/audio/{audio_id}/chapters", "chapters", audio_id, include_unpublished)

    async def list_parts(self, audio_id: str, include_unpublished: bool = True) -> list[OrderedUnit]:
        return await self._list_units(f"/audio/{audio_id}/parts", "parts", audio_id, include_unpublished)

    async def list_chapter_parts(self, chapter_id: str, include_unpublished: bool = True) -> list[OrderedUnit]:
        return await self._list_units(f"/audio/chapters/{chapter_id}/parts", "parts", chapter_id, include_unpublished)

    async def _create_unit(self, path: str, key: str, parent_id: str, payload: dict) -> OrderedUnit:
        data = await self._call("POST", path, json_body=payload)
        return OrderedUnit.from_api(data.get(key, data), parent_id)

    async def create_chapter(self, audio_id: str, payload: dict) -> OrderedUnit:
        return await self._create_unit(f"/audio/{audio_id}/chapters", "chapter", audio_id, payload)

    async def create_part(self, audio_id: str, payload: dict, chapter_id: str | None = None) -> OrderedUnit:
        if chapter_id:
            return await self._create_unit(f"/audio/chapters/{chapter_id}/parts", "part", chapter_id, payload)
        return await self._create_unit(f"/audio/{audio_id}/parts", "part", audio_id, payload)

    def close(self) -> None:
        self._session.close()


def _error_message(resp: requests.Response, method: str, path: str) -> str:
    """Prefer the server's own message; fall back to the status line."""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"{method} {path} failed with status {resp.status_code}"
