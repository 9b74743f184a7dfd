from typing import Iterable, Optional


class TranscriptError(Exception):
    """Base class for every classified acquisition failure."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class CredentialsNotReady(TranscriptError):
    pass


class NoTranscriptAvailable(TranscriptError):
    pass


class NoCaptionsAvailable(NoTranscriptAvailable):
    pass


class AuthenticationFailed(TranscriptError):
    pass


class MalformedResponse(TranscriptError):
    pass


class HttpError(TranscriptError):
    def __init__(self, status: Optional[int], message: Optional[str] = None, detail: Optional[str] = None):
        if message is None:
            message = f"Request failed with status {status}" if status is not None else "Request failed"
        super().__init__(message, detail)
        self.status = status


class AcquisitionCancelled(TranscriptError):
    def __init__(self, message: str = "Transcript acquisition was cancelled", detail: Optional[str] = None):
        super().__init__(message, detail)


def classify_status(
    status: int,
    *,
    not_found: Iterable[int] = (404,),
    auth: Iterable[int] = (401,),
    not_found_message: str = "No transcript available",
    auth_message: str = "Authentication failed",
    detail: Optional[str] = None,
) -> TranscriptError:
    """Map a non-2xx transport status to the error taxonomy."""
    if status in not_found:
        return NoTranscriptAvailable(not_found_message, detail)
    if status in auth:
        return AuthenticationFailed(auth_message, detail)
    return HttpError(status, f"Failed to fetch transcript: {status}", detail)
