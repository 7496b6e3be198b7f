"""Recording state machine: Idle → Starting → Recording → Stopped → Idle."""

import asyncio
import enum
import logging
import os
import tempfile

from segment_studio.capture import CaptureDevice
from segment_studio.constants import RECORDING_TICK_SECONDS
from segment_studio.errors import CaptureError, RecorderStateError
from segment_studio.models import CapturedClip, PendingSegment, RecordingSession
from segment_studio.staging import SegmentStagingQueue

logger = logging.getLogger(__name__)


class RecorderState(enum.Enum):
    IDLE = "idle"
    STARTING = "starting"
    RECORDING = "recording"
    STOPPED = "stopped"


def format_elapsed(seconds: int) -> str:
    """Format an elapsed-seconds counter as m:ss."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


class SegmentRecorder:
    """Wraps a CaptureDevice for one editing surface.

    Only one session is ever active. A stopped clip stays available for
    preview until it is added to the staging queue, discarded, or replaced
    by a new recording.
    """

    def __init__(self, device: CaptureDevice, tick_seconds: float = RECORDING_TICK_SECONDS):
        self.device = device
        self.tick_seconds = tick_seconds
        self.state = RecorderState.IDLE
        self.session = RecordingSession()
        self.error: str | None = None
        self._chunks: list[bytes] = []
        self._ticker: asyncio.Task | None = None
        self._preview_path: str | None = None

    @property
    def elapsed_seconds(self) -> int:
        return self.session.elapsed_seconds

    @property
    def elapsed_display(self) -> str:
        return format_elapsed(self.session.elapsed_seconds)

    @property
    def clip(self) -> CapturedClip | None:
        return self.session.captured

    @property
    def can_start(self) -> bool:
        return self.state not in (RecorderState.STARTING, RecorderState.RECORDING)

    @property
    def can_stop(self) -> bool:
        return self.state == RecorderState.RECORDING

    async def start(self) -> bool:
        """Acquire the device and begin capturing.

        Returns False when already starting or recording, or when the device
        is denied; the denial message is kept in self.error.
        """
        if not self.can_start:
            logger.debug("start() ignored: recorder is %s", self.state.value)
            return False

        previous = self.state
        self.state = RecorderState.STARTING
        self.error = None
        try:
            await self.device.request_capture()
        except CaptureError as e:
            logger.warning("Capture denied: %s", e)
            self.error = str(e)
            self.state = previous
            return False
        except BaseException:
            self.state = previous
            raise

        # A new recording replaces any clip not yet queued
        self._release_preview()
        self._chunks = []
        self.session = RecordingSession(active=True)
        self.state = RecorderState.RECORDING
        self._ticker = asyncio.create_task(self._tick())
        return True

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            self.session.elapsed_seconds += 1
            chunk = self.device.read_chunk()
            if chunk:
                self._chunks.append(chunk)

    async def _stop_ticker(self) -> Exception | None:
        """Cancel the ticker; return the error it died with, if any."""
        if self._ticker is None:
            return None
        ticker, self._ticker = self._ticker, None
        ticker.cancel()
        try:
            await ticker
        except asyncio.CancelledError:
            pass
        except Exception as e:
            return e
        return None

    def _abort(self, error: Exception) -> None:
        logger.warning("Capture failed: %s", error)
        self.device.release()
        self.error = str(error)
        self.state = RecorderState.IDLE
        self._chunks = []

    async def stop(self) -> CapturedClip | None:
        """Stop capturing and produce the clip. No-op unless recording."""
        if self.state != RecorderState.RECORDING:
            return None

        failure = await self._stop_ticker()
        self.session.active = False
        if failure is not None:
            self._abort(failure)
            return None
        try:
            tail = await self.device.stop_capture()
        except CaptureError as e:
            self._abort(e)
            return None

        if tail:
            self._chunks.append(tail)
        clip = CapturedClip(data=b"".join(self._chunks), content_type=self.device.content_type)
        self._chunks = []
        self.session.captured = clip
        self.state = RecorderState.STOPPED
        logger.info("Recorded %s (%d bytes)", self.elapsed_display, len(clip.data))
        return clip

    def add_to_queue(self, queue: SegmentStagingQueue) -> PendingSegment:
        """Hand the stopped clip to the staging queue and return to Idle."""
        if self.state != RecorderState.STOPPED or self.session.captured is None:
            raise RecorderStateError("No recording to add")
        segment = queue.add_recording(self.session.captured)
        self._reset()
        return segment

    def discard(self) -> None:
        """Drop the stopped clip without queueing it."""
        if self.state == RecorderState.STOPPED:
            self._reset()

    def _reset(self) -> None:
        self._release_preview()
        self.session = RecordingSession()
        self.state = RecorderState.IDLE

    def preview_path(self) -> str:
        """Write the stopped clip to a temporary file for playback."""
        if self.session.captured is None:
            raise RecorderStateError("No recording to preview")
        if self._preview_path is None:
            fd, path = tempfile.mkstemp(prefix="segment-preview-", suffix=self.device.extension)
            with os.fdopen(fd, "wb") as f:
                f.write(self.session.captured.data)
            self._preview_path = path
        return self._preview_path

    def _release_preview(self) -> None:
        if self._preview_path and os.path.exists(self._preview_path):
            os.remove(self._preview_path)
        self._preview_path = None

    async def close(self) -> None:
        """Tear down: stop the ticker, release the device and preview file."""
        if self.state == RecorderState.RECORDING:
            await self._stop_ticker()
            self.device.release()
            self.session.active = False
            self.state = RecorderState.IDLE
        self._release_preview()
