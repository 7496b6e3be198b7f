"""In-memory queue of segments waiting to be uploaded."""

import os
import time
from typing import Callable, Iterable, Iterator

from segment_studio.constants import (
    CAPTURE_FORMATS,
    DEFAULT_CONTENT_TYPE,
    MIME_TYPES,
    RECORDING_NAME_PREFIX,
)
from segment_studio.models import CapturedClip, PendingSegment


def content_type_for(filename: str) -> str:
    """Guess an audio content type from a file extension."""
    ext = os.path.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, DEFAULT_CONTENT_TYPE)


def extension_for(content_type: str) -> str:
    """File extension for a capture content type ("audio/webm;codecs=opus" → ".webm")."""
    base = content_type.split(";")[0].strip().lower()
    for ctype, ext, _codec in CAPTURE_FORMATS.values():
        if ctype == base:
            return ext
    for ext, ctype in MIME_TYPES.items():
        if ctype == base:
            return ext
    return ".bin"


class SegmentStagingQueue:
    """Ordered list of local-pending segments.

    Holds no position information: uploads append to the end of the
    server's list in queue order.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns):
        self._clock = clock
        self._items: list[PendingSegment] = []
        self._last_stamp = 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[PendingSegment]:
        return iter(list(self._items))

    def items(self) -> list[PendingSegment]:
        return list(self._items)

    @staticmethod
    def _load(file) -> PendingSegment:
        if isinstance(file, PendingSegment):
            return file
        path = os.fspath(file)
        with open(path, "rb") as f:
            data = f.read()
        name = os.path.basename(path)
        return PendingSegment(filename=name, data=data, content_type=content_type_for(name))

    def add(self, file) -> PendingSegment:
        """Queue a picked file (path) or a ready PendingSegment."""
        segment = self._load(file)
        self._items.append(segment)
        return segment

    def add_many(self, files: Iterable) -> list[PendingSegment]:
        """Queue several picks at once; if any file can't be read, none are queued."""
        segments = [self._load(f) for f in files]
        self._items.extend(segments)
        return segments

    def add_recording(self, clip: CapturedClip) -> PendingSegment:
        segment = PendingSegment(
            filename=self._recording_name(clip.content_type),
            data=clip.data,
            content_type=clip.content_type,
            source="recording",
        )
        self._items.append(segment)
        return segment

    def _recording_name(self, content_type: str) -> str:
        stamp = self._clock()
        if stamp <= self._last_stamp:
            stamp = self._last_stamp + 1
        self._last_stamp = stamp
        return f"{RECORDING_NAME_PREFIX}_{stamp}{extension_for(content_type)}"

    def remove_at(self, index: int) -> PendingSegment:
        if not 0 <= index < len(self._items):
            raise IndexError(f"No pending segment at index {index}")
        return self._items.pop(index)

    def flush_to_upload(self) -> list[PendingSegment]:
        """Drain the queue, returning everything in queue order."""
        drained, self._items = self._items, []
        return drained

    def requeue(self, segments: list[PendingSegment]) -> None:
        """Put a drained batch back in front of anything queued since."""
        self._items = list(segments) + self._items
