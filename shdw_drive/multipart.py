"""Multipart upload lifecycle management.

Handles the three-phase server-side session used for large files:
- Create the session with a signed init request
- Upload fixed-size parts sequentially, in ascending part number order
- Complete the session with the ordered list of part ETags

A session lives for one upload call only. There is no abort request, so a
failure at any phase leaves the server-side session orphaned.
"""

import logging
import math
from enum import Enum
from typing import Callable, Generator, Optional

import httpx

from shdw_drive.config import DriveConfig
from shdw_drive.errors import (
    CompletionFailed,
    PartUploadFailed,
    ResponseParseFailed,
    ShdwDriveError,
    UploadFailed,
)
from shdw_drive.http import error_message, parse_json
from shdw_drive.messages import multipart_init_message, sign_envelope
from shdw_drive.models import UploadOutcome, UploadTarget, UploadedPart
from shdw_drive.signer import MessageSigner

logger = logging.getLogger(__name__)

# Part size, and the largest file sent as a single request (5 MiB)
CHUNK_SIZE = 5 * 1024 * 1024

CREATE_PATH = "/v1/object/multipart/create"
UPLOAD_PART_PATH = "/v1/object/multipart/upload-part"
COMPLETE_PATH = "/v1/object/multipart/complete"


class SessionState(Enum):
    """Lifecycle state of a multipart session."""

    PENDING = "pending"
    CREATED = "created"
    UPLOADING_PART = "uploading_part"
    COMPLETED = "completed"
    FAILED = "failed"


def total_parts(size: int, chunk_size: int = CHUNK_SIZE) -> int:
    """Number of parts needed for ``size`` bytes."""
    return math.ceil(size / chunk_size)


def iterate_parts(
    data: bytes,
    chunk_size: int = CHUNK_SIZE,
) -> Generator[tuple[int, bytes], None, None]:
    """Iterate over file parts.

    Args:
        data: The full file contents.
        chunk_size: Size of each chunk in bytes.

    Yields:
        Tuples of (part_number, chunk_data), numbered from 1. Only the last
        chunk may be shorter than ``chunk_size``.
    """
    view = memoryview(data)
    for index, start in enumerate(range(0, len(data), chunk_size)):
        yield index + 1, bytes(view[start:start + chunk_size])


class MultipartSession:
    """Drives one multipart upload through create, parts and complete.

    State transitions are checked: calling a phase out of order is a
    programming error and raises RuntimeError. Protocol failures move the
    session to FAILED, record the reason and propagate.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        config: DriveConfig,
        signer: MessageSigner,
        target: UploadTarget,
        chunk_size: int = CHUNK_SIZE,
    ):
        """Initialize the session.

        Args:
            http_client: httpx client for HTTP requests
            config: Drive configuration
            signer: Signer for the init request and the session identity
            target: Bucket, key, size and MIME type of the upload
            chunk_size: Part size in bytes
        """
        self.http_client = http_client
        self.config = config
        self.signer = signer
        self.target = target
        self.chunk_size = chunk_size
        self.state = SessionState.PENDING
        self.failure: Optional[Exception] = None
        self.upload_id: Optional[str] = None
        self.key: Optional[str] = None
        self._signer_identity: Optional[str] = None
        self._parts: list[UploadedPart] = []

    @property
    def parts(self) -> tuple[UploadedPart, ...]:
        """Parts stored so far, in upload order."""
        return tuple(self._parts)

    @property
    def next_part_number(self) -> int:
        return len(self._parts) + 1

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            raise RuntimeError(
                f"Invalid multipart session state: {self.state.value}"
            )

    def _fail(self, error: Exception) -> None:
        self.state = SessionState.FAILED
        self.failure = error

    def create(self) -> str:
        """Open the server-side session.

        Returns:
            The upload ID issued by the server.

        Raises:
            UploadFailed: If the server rejects the init request.
            ResponseParseFailed: If the response lacks uploadId or key.
        """
        self._require(SessionState.PENDING)
        try:
            envelope = sign_envelope(
                self.signer,
                multipart_init_message(
                    self.target.bucket, self.target.key, self.target.size
                ),
            )
            response = self.http_client.post(
                self.config.url(CREATE_PATH),
                json={
                    "bucket": self.target.bucket,
                    "filename": self.target.key,
                    "message": envelope.signature,
                    "signer": envelope.signer,
                    "size": self.target.size,
                    "file_type": self.target.mime_type,
                },
            )
            if not response.is_success:
                raise UploadFailed(
                    error_message(response, "Failed to initialize multipart upload"),
                    response.status_code,
                )

            data = parse_json(response)
            if not isinstance(data, dict) or not data.get("uploadId") or not data.get("key"):
                raise ResponseParseFailed(
                    "Multipart init response is missing uploadId or key"
                )
        except (ShdwDriveError, httpx.HTTPError) as e:
            self._fail(e)
            raise

        self.upload_id = data["uploadId"]
        # The server-issued key is authoritative for every later request
        self.key = data["key"]
        self._signer_identity = envelope.signer
        self.state = SessionState.CREATED
        logger.info(
            "Created multipart upload %s for %s (%d bytes)",
            self.upload_id, self.key, self.target.size,
        )
        return self.upload_id

    def upload_part(self, part_number: int, chunk: bytes) -> UploadedPart:
        """Upload one part and record its ETag.

        Args:
            part_number: Must equal ``next_part_number``.
            chunk: The part's bytes.

        Returns:
            The recorded part.

        Raises:
            PartUploadFailed: If the server rejects the part.
            ResponseParseFailed: If the response carries no ETag.
        """
        self._require(SessionState.CREATED, SessionState.UPLOADING_PART)
        if part_number != self.next_part_number:
            raise RuntimeError(
                f"Expected part {self.next_part_number}, got part {part_number}"
            )

        self.state = SessionState.UPLOADING_PART
        try:
            response = self.http_client.post(
                self.config.url(UPLOAD_PART_PATH),
                data={
                    "bucket": self.target.bucket,
                    "uploadId": self.upload_id,
                    "partNumber": str(part_number),
                    "key": self.key,
                    "signer": self._signer_identity,
                },
                files={"file": (self.target.filename, chunk, "application/octet-stream")},
            )
            if not response.is_success:
                raise PartUploadFailed(part_number, response.status_code)

            data = parse_json(response)
            etag = data.get("ETag") if isinstance(data, dict) else None
            if not etag:
                raise ResponseParseFailed(f"No ETag returned for part {part_number}")
        except (ShdwDriveError, httpx.HTTPError) as e:
            self._fail(e)
            raise

        part = UploadedPart(etag=etag, part_number=part_number)
        self._parts.append(part)
        logger.debug("Stored part %d (%d bytes)", part_number, len(chunk))
        return part

    def complete(self) -> UploadOutcome:
        """Ask the server to stitch the stored parts into the final object.

        Raises:
            CompletionFailed: If the server rejects the completion.
            ResponseParseFailed: If the response body is not JSON.
        """
        self._require(SessionState.UPLOADING_PART)
        try:
            response = self.http_client.post(
                self.config.url(COMPLETE_PATH),
                json={
                    "bucket": self.target.bucket,
                    "uploadId": self.upload_id,
                    "key": self.key,
                    "parts": [part.to_wire() for part in self._parts],
                    "signer": self._signer_identity,
                },
            )
            if not response.is_success:
                raise CompletionFailed(
                    error_message(response, "Failed to complete multipart upload"),
                    response.status_code,
                )

            data = parse_json(response)
            if not isinstance(data, dict):
                raise ResponseParseFailed("Multipart completion response is not an object")
        except (ShdwDriveError, httpx.HTTPError) as e:
            self._fail(e)
            raise

        self.state = SessionState.COMPLETED
        logger.info("Completed multipart upload %s (%d parts)", self.upload_id, len(self._parts))
        return UploadOutcome.from_response(data)

    def run(
        self,
        data: bytes,
        on_part: Optional[Callable[[int, int], None]] = None,
    ) -> UploadOutcome:
        """Run the whole lifecycle for ``data``.

        Args:
            data: The full file contents.
            on_part: Called with (parts_completed, total_parts) after each
                stored part.

        Returns:
            The finalized upload outcome.
        """
        count = total_parts(len(data), self.chunk_size)
        self.create()
        for part_number, chunk in iterate_parts(data, self.chunk_size):
            self.upload_part(part_number, chunk)
            if on_part:
                on_part(part_number, count)
        return self.complete()
