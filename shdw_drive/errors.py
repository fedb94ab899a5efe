"""Exception hierarchy for shdw-drive operations.

Every error is terminal to the operation that raised it; nothing here is
retried internally.
"""

from typing import Optional


class ShdwDriveError(Exception):
    """Base class for all shdw-drive client errors."""

    pass


class NoSigningMethod(ShdwDriveError):
    """Raised when a message must be signed but no signing capability exists."""

    def __init__(self, message: str = "No signing method available"):
        super().__init__(message)


class NoSigner(ShdwDriveError):
    """Raised when no signer identity (public key) is available."""

    def __init__(self, message: str = "No signer available"):
        super().__init__(message)


class UploadFailed(ShdwDriveError):
    """Raised when an upload request is rejected by the server."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PartUploadFailed(UploadFailed):
    """Raised when a single multipart part cannot be stored."""

    def __init__(self, part_number: int, status_code: Optional[int] = None):
        super().__init__(f"Failed to upload part {part_number}", status_code)
        self.part_number = part_number


class CompletionFailed(UploadFailed):
    """Raised when the server refuses to finalize a multipart upload."""

    pass


class DeleteFailed(ShdwDriveError):
    """Raised when the delete endpoint fails or returns an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ListFailed(ShdwDriveError):
    """Raised when the object listing endpoint returns a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseParseFailed(ShdwDriveError):
    """Raised when a successful response body is not the expected JSON."""

    pass
