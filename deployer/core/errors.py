"""Exit codes and fatal errors.

ErrorCode values double as process exit statuses. DeployError subclasses are
the fatal failures of a run; each one carries the exit code the CLI reports.
"""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "ErrorCode",
    "DeployError",
    "MissingConfigError",
    "ReleaseCreationError",
    "ArtifactError",
    "UploadError",
]


class ErrorCode(IntEnum):
    """Exit codes for the CLI.

    - 0: Success
    - 1: User error (missing or invalid configuration)
    - 4: Network error (API rejected the request, upload failed)
    - 5: I/O error (artifact directory missing or unreadable)
    """

    OK = 0
    USER_ERROR = 1
    NETWORK_ERROR = 4
    IO_ERROR = 5


class DeployError(Exception):
    """Base class for failures that abort a publish run."""

    code: ErrorCode = ErrorCode.USER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingConfigError(DeployError):
    """A required configuration key is absent (or could not be parsed)."""

    code = ErrorCode.USER_ERROR

    def __init__(self, key: str, kind: str) -> None:
        super().__init__(f"Missing argument {key} of type {kind}")
        self.key = key
        self.kind = kind


class ReleaseCreationError(DeployError):
    """The releases endpoint refused to create the release."""

    code = ErrorCode.NETWORK_ERROR

    def __init__(self, message: str, *, status: int = 0, body: str = "") -> None:
        detail = f"{message}\n{body}" if body else message
        super().__init__(detail)
        self.status = status
        self.body = body


class ArtifactError(DeployError):
    code = ErrorCode.IO_ERROR


class UploadError(DeployError):
    """An artifact upload failed; remaining artifacts are not attempted."""

    code = ErrorCode.NETWORK_ERROR

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Upload of {name} failed: {reason}")
        self.name = name
        self.reason = reason
