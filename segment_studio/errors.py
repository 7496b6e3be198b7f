"""Exception taxonomy shared by every orchestration module."""


class SegmentStudioError(Exception):
    """Base for recoverable failures surfaced to the user."""


class CaptureError(SegmentStudioError):
    """Capture device denied, busy, or failed while recording."""


class RecorderStateError(SegmentStudioError):
    """Recorder action not allowed in its current state."""


class ApiError(SegmentStudioError):
    """Remote content API answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ApiUnavailableError(ApiError):
    """Remote content API could not be reached."""


class AuthenticationRequiredError(ApiError):
    """No bearer credential in session storage."""


class NothingToUploadError(SegmentStudioError):
    pass


class NothingToMergeError(SegmentStudioError):
    pass


class BusyError(SegmentStudioError):
    """An order-mutating request is already in flight."""


class ValidationError(SegmentStudioError):
    pass


class DuplicateOrderError(ApiError):
    """Server rejected a create because the proposed order is taken."""
