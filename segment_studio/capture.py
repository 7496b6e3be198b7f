"""Capture devices feeding the segment recorder.

The recorder only sees the small capability below. Microphone access is a
platform concern; the devices shipped here replay an audio file or generate
a test tone so the pipeline runs headless.
"""

import asyncio
import io
import logging
import time

import numpy as np
from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from segment_studio.constants import (
    CAPTURE_CHUNK_MS,
    CAPTURE_FORMAT,
    CAPTURE_FORMATS,
    CAPTURE_SAMPLE_RATE,
    TEST_TONE_HZ,
)
from segment_studio.errors import CaptureError

logger = logging.getLogger(__name__)


class CaptureDevice:
    """Exclusive audio input.

    request_capture() acquires the device or raises CaptureError,
    read_chunk() is polled once per recorder tick and returns newly encoded
    bytes (possibly empty), stop_capture() returns whatever is left and
    releases the device.
    """

    content_type = "application/octet-stream"
    extension = ""

    async def request_capture(self) -> None:
        raise NotImplementedError

    def read_chunk(self) -> bytes:
        return b""

    async def stop_capture(self) -> bytes:
        raise NotImplementedError

    def release(self) -> None:
        pass


class _BufferedCaptureDevice(CaptureDevice):
    """Buffers decoded audio per tick and encodes once on stop."""

    def __init__(self, fmt: str = CAPTURE_FORMAT, clock=time.monotonic):
        if fmt not in CAPTURE_FORMATS:
            raise ValueError(f"Unsupported capture format: {fmt}")
        self.format = fmt
        self.content_type, self.extension, self._codec = CAPTURE_FORMATS[fmt]
        self._clock = clock
        self._acquired = False
        self._buffer: list[AudioSegment] | None = None
        self._last_read = 0.0

    @property
    def is_open(self) -> bool:
        return self._acquired

    async def request_capture(self) -> None:
        if self._acquired:
            raise CaptureError("Capture device is already in use")
        # Claimed before opening
        self._acquired = True
        try:
            await asyncio.to_thread(self._open)
        except BaseException:
            self._acquired = False
            raise
        self._buffer = []
        self._last_read = self._clock()

    def _open(self) -> None:
        pass

    def _next_chunk(self, duration_ms: int) -> AudioSegment:
        raise NotImplementedError

    def read_chunk(self) -> bytes:
        if self._buffer is None:
            return b""
        self._buffer.append(self._next_chunk(CAPTURE_CHUNK_MS))
        self._last_read = self._clock()
        return b""

    async def stop_capture(self) -> bytes:
        if self._buffer is None:
            raise CaptureError("Capture device is not recording")
        try:
            # Audio captured since the last tick
            tail_ms = int(min(CAPTURE_CHUNK_MS, (self._clock() - self._last_read) * 1000))
            if tail_ms > 0:
                self._buffer.append(self._next_chunk(tail_ms))
            return await asyncio.to_thread(self._encode, list(self._buffer))
        finally:
            self.release()

    def _encode(self, chunks: list[AudioSegment]) -> bytes:
        audio = AudioSegment.silent(duration=0, frame_rate=CAPTURE_SAMPLE_RATE)
        for chunk in chunks:
            audio += chunk
        out = io.BytesIO()
        kwargs = {"codec": self._codec} if self._codec else {}
        try:
            audio.export(out, format=self.format, **kwargs)
        except Exception as e:
            raise CaptureError(f"Could not encode recording: {e}") from e
        return out.getvalue()

    def release(self) -> None:
        self._buffer = None
        self._acquired = False


class FileCaptureDevice(_BufferedCaptureDevice):
    """Replays an audio file as the input signal, one slice per tick."""

    def __init__(self, source_path: str, fmt: str = CAPTURE_FORMAT, loop: bool = False, clock=time.monotonic):
        super().__init__(fmt, clock)
        self.source_path = source_path
        self.loop = loop
        self._source: AudioSegment | None = None
        self._position = 0

    def _open(self) -> None:
        try:
            self._source = AudioSegment.from_file(self.source_path)
        except (OSError, CouldntDecodeError) as e:
            raise CaptureError(f"Could not access audio input {self.source_path}: {e}") from e
        self._position = 0
        logger.debug("Capturing from %s (%d ms)", self.source_path, len(self._source))

    def _next_chunk(self, duration_ms: int) -> AudioSegment:
        source = self._source
        chunk = source[self._position:self._position + duration_ms]
        self._position += duration_ms
        if self.loop and len(source) > 0:
            # Wrap around so the input never runs dry
            while len(chunk) < duration_ms:
                chunk += source[:duration_ms - len(chunk)]
            self._position %= len(source)
        return chunk

    def release(self) -> None:
        super().release()
        self._source = None


class ToneCaptureDevice(_BufferedCaptureDevice):
    """Sine test signal, useful to exercise the pipeline without a microphone."""

    def __init__(
        self,
        frequency: float = TEST_TONE_HZ,
        fmt: str = CAPTURE_FORMAT,
        amplitude: float = 0.5,
        clock=time.monotonic,
    ):
        super().__init__(fmt, clock)
        self.frequency = frequency
        self.amplitude = amplitude
        self._sample_index = 0

    def _open(self) -> None:
        self._sample_index = 0

    def _next_chunk(self, duration_ms: int) -> AudioSegment:
        count = int(CAPTURE_SAMPLE_RATE * duration_ms / 1000)
        # Continue the phase from the previous chunk to avoid clicks
        n = np.arange(self._sample_index, self._sample_index + count)
        self._sample_index += count
        wave = np.sin(2 * np.pi * self.frequency * n / CAPTURE_SAMPLE_RATE) * self.amplitude
        samples = (wave * 32767).astype(np.int16)
        return AudioSegment(
            data=samples.tobytes(),
            sample_width=2,
            frame_rate=CAPTURE_SAMPLE_RATE,
            channels=1,
        )
