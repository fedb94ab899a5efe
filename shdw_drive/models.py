"""Data models for the shdw-drive client."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from shdw_drive.errors import ResponseParseFailed


class ProgressStatus(Enum):
    """Status carried by a progress event."""

    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressEvent:
    """A single progress notification delivered to an upload sink."""

    status: ProgressStatus
    percent: float


@dataclass(frozen=True)
class SignedEnvelope:
    """A canonical message together with its detached signature."""

    message: str
    signature: str
    signer: str


@dataclass
class UploadTarget:
    """Where and what an upload writes."""

    bucket: str
    directory: str
    filename: str
    size: int
    mime_type: str

    @property
    def key(self) -> str:
        """Object key: normalized directory plus file name."""
        if self.directory:
            return f"{self.directory}/{self.filename}"
        return self.filename


@dataclass(frozen=True)
class UploadError:
    """A per-file error reported inside an otherwise successful upload."""

    file: str
    storage_account: str
    error: str


@dataclass
class UploadOutcome:
    """Result of a finished upload."""

    finalized_location: str
    message: Optional[str] = None
    upload_errors: list[UploadError] = field(default_factory=list)

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "UploadOutcome":
        """Build an outcome from a decoded server response body."""
        errors = [
            UploadError(
                file=item.get("file", ""),
                storage_account=item.get("storage_account", ""),
                error=item.get("error", ""),
            )
            for item in data.get("upload_errors") or []
        ]
        return cls(
            finalized_location=data.get("finalized_location", ""),
            message=data.get("message"),
            upload_errors=errors,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "finalized_location": self.finalized_location,
            "message": self.message,
            "upload_errors": [
                {"file": e.file, "storage_account": e.storage_account, "error": e.error}
                for e in self.upload_errors
            ],
        }


@dataclass(frozen=True)
class UploadedPart:
    """A stored multipart part and the ETag the server issued for it."""

    etag: str
    part_number: int

    def to_wire(self) -> dict[str, Any]:
        return {"ETag": self.etag, "PartNumber": self.part_number}


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete call. ``success`` is False for a missing object."""

    success: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "message": self.message}


@dataclass(frozen=True)
class ObjectInfo:
    """One entry of a bucket listing."""

    key: str
    size: int = 0
    last_modified: Optional[str] = None

    @classmethod
    def from_response(cls, data: dict[str, Any]) -> "ObjectInfo":
        """Build an entry from a decoded listing item.

        Raises:
            ResponseParseFailed: If the item is not an object or its size is
                not a number.
        """
        if not isinstance(data, dict):
            raise ResponseParseFailed("Listing entry is not an object")
        try:
            size = int(data.get("size") or 0)
        except (TypeError, ValueError) as e:
            raise ResponseParseFailed(
                f"Invalid size for listed object {data.get('key')!r}: {data.get('size')!r}"
            ) from e
        return cls(
            key=data.get("key", ""),
            size=size,
            last_modified=data.get("lastModified"),
        )
