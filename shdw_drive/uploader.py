"""Upload orchestration.

Chooses the upload strategy by file size and drives it to completion:
- Files up to 5 MiB go out as one signed form POST
- Larger files go through a MultipartSession

Progress events go to a caller-supplied sink. On any failure exactly one
``error`` event at 0% is emitted before the error is re-raised.
"""

import logging
import mimetypes
import re
from typing import Callable, Optional

import httpx

from shdw_drive.config import DriveConfig
from shdw_drive.errors import ResponseParseFailed, UploadFailed
from shdw_drive.http import error_message, parse_json
from shdw_drive.messages import sign_envelope, upload_message
from shdw_drive.models import (
    ProgressEvent,
    ProgressStatus,
    UploadOutcome,
    UploadTarget,
)
from shdw_drive.multipart import CHUNK_SIZE, MultipartSession
from shdw_drive.signer import MessageSigner

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/v1/object/upload"

# Share of the progress bar covered by part uploads; completion adds the rest
PARTS_PROGRESS_SHARE = 90.0

DEFAULT_MIME_TYPE = "application/octet-stream"

ProgressSink = Callable[[ProgressEvent], None]


def normalize_directory(directory: Optional[str]) -> str:
    """Strip outer slashes and collapse repeated inner ones.

    >>> normalize_directory("/a//b/")
    'a/b'
    """
    if not directory:
        return ""
    return re.sub(r"/{2,}", "/", directory).strip("/")


def guess_mime_type(file_name: str) -> str:
    mime_type, _ = mimetypes.guess_type(file_name)
    return mime_type or DEFAULT_MIME_TYPE


class UploadOrchestrator:
    """Uploads files using the single-request or multipart protocol."""

    def __init__(
        self,
        http_client: httpx.Client,
        config: DriveConfig,
        signer: MessageSigner,
    ):
        """Initialize the orchestrator.

        Args:
            http_client: httpx client for HTTP requests
            config: Drive configuration
            signer: Signer authenticating upload requests
        """
        self.http_client = http_client
        self.config = config
        self.signer = signer

    def upload(
        self,
        bucket: str,
        data: bytes,
        file_name: str,
        mime_type: Optional[str] = None,
        directory: Optional[str] = None,
        on_progress: Optional[ProgressSink] = None,
    ) -> UploadOutcome:
        """Upload ``data`` as ``file_name`` into ``bucket``.

        Args:
            bucket: Storage account / bucket identifier.
            data: File contents.
            file_name: Object file name.
            mime_type: MIME type; guessed from the file name when omitted.
            directory: Optional directory inside the bucket.
            on_progress: Sink receiving ProgressEvents.

        Returns:
            The finalized upload outcome.

        Raises:
            UploadFailed: If any request is rejected (PartUploadFailed and
                CompletionFailed for the multipart phases).
            ResponseParseFailed: If a success response cannot be decoded.
            NoSigningMethod, NoSigner: If the signer cannot authenticate.
        """
        target = UploadTarget(
            bucket=bucket,
            directory=normalize_directory(directory),
            filename=file_name,
            size=len(data),
            mime_type=mime_type or guess_mime_type(file_name),
        )

        def emit(status: ProgressStatus, percent: float) -> None:
            if on_progress:
                on_progress(ProgressEvent(status=status, percent=percent))

        try:
            if target.size <= CHUNK_SIZE:
                logger.info("Starting single-request upload of %s", target.key)
                outcome = self._upload_single(target, data)
            else:
                logger.info(
                    "File size %d > %d, starting multipart upload of %s",
                    target.size, CHUNK_SIZE, target.key,
                )
                outcome = self._upload_multipart(target, data, emit)
        except Exception:
            emit(ProgressStatus.ERROR, 0)
            raise

        emit(ProgressStatus.COMPLETE, 100)
        logger.info("Upload finalized at %s", outcome.finalized_location)
        return outcome

    def _upload_single(self, target: UploadTarget, data: bytes) -> UploadOutcome:
        envelope = sign_envelope(
            self.signer, upload_message(target.bucket, target.filename)
        )

        response = self.http_client.post(
            self.config.url(UPLOAD_PATH),
            data={
                "message": envelope.signature,
                "signer": envelope.signer,
                "storage_account": target.bucket,
                "directory": target.directory,
            },
            files={"file": (target.filename, data, target.mime_type)},
        )

        if not response.is_success:
            raise UploadFailed(
                error_message(response, "Upload failed"), response.status_code
            )

        body = parse_json(response)
        if not isinstance(body, dict):
            raise ResponseParseFailed("Upload response is not an object")
        return UploadOutcome.from_response(body)

    def _upload_multipart(
        self,
        target: UploadTarget,
        data: bytes,
        emit: Callable[[ProgressStatus, float], None],
    ) -> UploadOutcome:
        session = MultipartSession(self.http_client, self.config, self.signer, target)

        def on_part(completed: int, total: int) -> None:
            emit(ProgressStatus.UPLOADING, completed * PARTS_PROGRESS_SHARE / total)

        return session.run(data, on_part=on_part)
