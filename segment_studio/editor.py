"""One editing surface for an audio artifact.

Wires the recorder and file picks into the staging queue, and routes
upload, reorder, remove and merge through their coordinators. Every
successful mutation replaces `artifact` with the server's copy; failures
leave it and the queue as they were and put the message on the banner.
"""

import logging

from segment_studio.api import ContentApiClient
from segment_studio.capture import CaptureDevice
from segment_studio.controller import SegmentOrderController
from segment_studio.errors import SegmentStudioError
from segment_studio.merge import MergeCoordinator
from segment_studio.models import AudioArtifact, CapturedClip, PendingSegment
from segment_studio.recorder import SegmentRecorder
from segment_studio.staging import SegmentStagingQueue
from segment_studio.status import StatusBanner
from segment_studio.uploader import SegmentUploader

logger = logging.getLogger(__name__)


class AudioEditor:
    def __init__(
        self,
        api: ContentApiClient,
        audio_id: str,
        device: CaptureDevice | None = None,
        banner: StatusBanner | None = None,
    ):
        self.api = api
        self.audio_id = audio_id
        self.banner = banner or StatusBanner()
        self.queue = SegmentStagingQueue()
        self.recorder = SegmentRecorder(device) if device is not None else None
        self.uploader = SegmentUploader(api)
        self.controller = SegmentOrderController(api)
        self.merger = MergeCoordinator(api, self.banner)
        self.artifact: AudioArtifact | None = None
        self.load_error: str | None = None

    @property
    def busy(self) -> bool:
        return self.controller.busy

    async def load(self) -> AudioArtifact | None:
        """Fetch the artifact. Failure sets the page-level load_error."""
        try:
            self.artifact = await self.api.get_audio(self.audio_id)
        except SegmentStudioError as e:
            logger.error("Failed to load audio %s: %s", self.audio_id, e)
            self.load_error = f"Failed to load audio: {e}"
            return None
        self.load_error = None
        return self.artifact

    def _require_artifact(self) -> AudioArtifact:
        if self.artifact is None:
            raise SegmentStudioError("Audio is not loaded")
        return self.artifact

    # --- Local staging ---

    def stage_files(self, paths) -> list[PendingSegment]:
        return self.queue.add_many(paths)

    def unstage(self, index: int) -> PendingSegment:
        return self.queue.remove_at(index)

    async def start_recording(self) -> bool:
        if self.recorder is None:
            self.banner.error("No capture device configured")
            return False
        started = await self.recorder.start()
        if not started and self.recorder.error:
            self.banner.error(f"Could not access microphone: {self.recorder.error}")
        return started

    async def stop_recording(self) -> CapturedClip | None:
        if self.recorder is None:
            return None
        clip = await self.recorder.stop()
        if clip is None and self.recorder.error:
            self.banner.error(f"Recording failed: {self.recorder.error}")
        return clip

    def keep_recording(self) -> PendingSegment:
        """Add the stopped recording to the staging queue."""
        if self.recorder is None:
            raise SegmentStudioError("No capture device configured")
        return self.recorder.add_to_queue(self.queue)

    def discard_recording(self) -> None:
        if self.recorder is not None:
            self.recorder.discard()

    # --- Server-side mutations ---

    async def upload(self) -> bool:
        try:
            artifact = self._require_artifact()
            count = len(self.queue)
            self.artifact = await self.uploader.upload(artifact.id, self.queue)
        except SegmentStudioError as e:
            self.banner.error(f"Failed to upload segments: {e}")
            return False
        self.banner.success(f"Uploaded {count} segment(s)")
        return True

    async def move(self, index: int, direction: int) -> bool:
        try:
            artifact = self._require_artifact()
            self.artifact = await self.controller.move(artifact, index, direction)
        except (SegmentStudioError, IndexError, ValueError) as e:
            self.banner.error(f"Failed to reorder: {e}")
            return False
        return True

    async def remove(self, public_id: str) -> bool:
        try:
            artifact = self._require_artifact()
            self.artifact = await self.controller.remove(artifact, public_id)
        except SegmentStudioError as e:
            self.banner.error(f"Failed to delete segment: {e}")
            return False
        self.banner.success("Segment deleted")
        return True

    async def merge(self) -> bool:
        if self.artifact is None:
            self.banner.error("Audio is not loaded")
            return False
        try:
            self.artifact = await self.merger.merge(self.artifact)
        except SegmentStudioError:
            # MergeCoordinator already set the banner
            return False
        return True

    async def close(self) -> None:
        if self.recorder is not None:
            await self.recorder.close()
