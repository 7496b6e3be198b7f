"""Server-side merge of the persisted segment list into one file."""

import logging

from segment_studio.api import ContentApiClient
from segment_studio.errors import NothingToMergeError, SegmentStudioError
from segment_studio.models import AudioArtifact
from segment_studio.status import StatusBanner

logger = logging.getLogger(__name__)


class MergeCoordinator:
    def __init__(self, api: ContentApiClient, banner: StatusBanner | None = None):
        self.api = api
        self.banner = banner or StatusBanner()

    async def merge(self, artifact: AudioArtifact) -> AudioArtifact:
        """Ask the server to assemble the segments in their current order.

        Pending (unuploaded) segments are not included; upload first.
        Success and failure both show a self-clearing banner; failures
        are re-raised for the caller.
        """
        if not artifact.segment_public_ids:
            self.banner.error("Nothing to merge: upload segments first")
            raise NothingToMergeError("Audio has no uploaded segments to merge")

        try:
            merged = await self.api.merge_segments(artifact.id)
        except SegmentStudioError as e:
            self.banner.error(f"Failed to merge segments: {e}")
            raise

        self.banner.success(f"Merged {len(artifact.segment_public_ids)} segment(s)")
        return merged
