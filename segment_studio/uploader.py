"""Batch upload of staged segments."""

import logging

from segment_studio.api import ContentApiClient
from segment_studio.errors import NothingToUploadError
from segment_studio.models import AudioArtifact
from segment_studio.staging import SegmentStagingQueue

logger = logging.getLogger(__name__)


class SegmentUploader:
    def __init__(self, api: ContentApiClient):
        self.api = api

    async def upload(self, audio_id: str, queue: SegmentStagingQueue) -> AudioArtifact:
        """Append everything staged to the end of the server's segment list.

        The queue is emptied only once the server confirms; on any failure
        the batch goes back to the front of the queue and the error
        propagates. The returned artifact is the server's own copy.
        """
        if not len(queue):
            raise NothingToUploadError("No pending segments to upload")

        batch = queue.flush_to_upload()
        try:
            artifact = await self.api.append_segments(audio_id, batch)
        except BaseException:
            queue.requeue(batch)
            raise

        logger.info(
            "Uploaded %d segment(s) to %s (%d on server)",
            len(batch), audio_id, len(artifact.segment_public_ids),
        )
        return artifact
