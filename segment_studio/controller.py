"""Reorder and remove persisted segments against the server-held list."""

import contextlib
import logging

from segment_studio.api import ContentApiClient
from segment_studio.errors import BusyError
from segment_studio.models import AudioArtifact

logger = logging.getLogger(__name__)


def propose_move(ids: list[str], source_index: int, direction: int) -> list[str] | None:
    """Swap ids[source_index] with its neighbour in `direction`.

    Returns the proposed list, or None when the neighbour would fall off
    either end (nothing to do).
    """
    if direction not in (-1, 1):
        raise ValueError(f"direction must be -1 or +1, got {direction}")
    if not 0 <= source_index < len(ids):
        raise IndexError(f"No segment at index {source_index}")
    target = source_index + direction
    if not 0 <= target < len(ids):
        return None
    proposed = list(ids)
    proposed[source_index], proposed[target] = proposed[target], proposed[source_index]
    return proposed


class SegmentOrderController:
    """Proposes order changes; the server's answer always wins.

    One request at a time: callers must wait for the echo before issuing
    the next change.
    """

    def __init__(self, api: ContentApiClient):
        self.api = api
        self._in_flight = False

    @property
    def busy(self) -> bool:
        return self._in_flight

    @contextlib.asynccontextmanager
    async def _exclusive(self):
        if self._in_flight:
            raise BusyError("Another segment change is still in progress")
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    async def move(self, artifact: AudioArtifact, source_index: int, direction: int) -> AudioArtifact:
        """Move one segment up (-1) or down (+1).

        Returns the artifact unchanged, without a request, at either end.
        """
        proposed = propose_move(artifact.segment_public_ids, source_index, direction)
        if proposed is None:
            logger.debug("move(%d, %+d) is at the boundary: no-op", source_index, direction)
            return artifact

        urls = None
        if len(artifact.segment_urls) == len(artifact.segment_public_ids):
            urls = propose_move(artifact.segment_urls, source_index, direction)

        async with self._exclusive():
            echo = await self.api.reorder_segments(artifact.id, proposed, urls)
        if echo.segment_public_ids != proposed:
            logger.info("Server order differs from proposal for %s; adopting server order", artifact.id)
        return echo

    async def remove(self, artifact: AudioArtifact, public_id: str) -> AudioArtifact:
        async with self._exclusive():
            return await self.api.remove_segment(artifact.id, public_id)
