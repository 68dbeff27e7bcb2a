"""Internal step failure signal."""
from typing import Optional

from .models import ErrorKind, UploadError, unexpected_response_error


class StepError(Exception):
    """
    Raised by a single upload step to abort its sequence.

    Always caught at the public boundary and turned into ``Result.fail``.
    """

    def __init__(self, error: UploadError):
        super().__init__(str(error))
        self.error = error

    @classmethod
    def unexpected_response(cls, status_code: int, body: str) -> "StepError":
        return cls(unexpected_response_error(status_code, body))

    @classmethod
    def decode(cls, message: str, body: Optional[str] = None) -> "StepError":
        return cls(UploadError(ErrorKind.DECODE, message, body=body))

    @classmethod
    def protocol(cls, message: str, body: Optional[str] = None) -> "StepError":
        return cls(UploadError(ErrorKind.PROTOCOL, message, body=body))

    @classmethod
    def validation(cls, message: str) -> "StepError":
        return cls(UploadError(ErrorKind.VALIDATION, message))

    @classmethod
    def transport(cls, message: str) -> "StepError":
        return cls(UploadError(ErrorKind.TRANSPORT, message))


def describe_exception(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return f"{type(exc).__name__}: {repr(exc)}"
