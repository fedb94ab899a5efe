"""Object deletion with an existence precheck.

Deleting is best-effort and idempotent from the caller's side: a missing
object is a normal negative result, never an exception.

The precheck fails open to "does not exist": a listing that cannot be
fetched or decoded is logged and treated as a missing object, so a
transient listing failure can skip a real deletion.
"""

import logging
from typing import Any
from urllib.parse import urlparse

import httpx

from shdw_drive.config import DriveConfig
from shdw_drive.errors import DeleteFailed, ListFailed, ResponseParseFailed
from shdw_drive.listing import fetch_entries
from shdw_drive.messages import delete_message, sign_envelope
from shdw_drive.models import DeleteResult
from shdw_drive.signer import MessageSigner

logger = logging.getLogger(__name__)

DELETE_PATH = "/v1/object/delete"

NOT_FOUND_MESSAGE = "File does not exist or has already been deleted"
DELETED_MESSAGE = "File deleted successfully"


def resolve_object_key(bucket: str, file_url_or_path: str) -> str:
    """Turn a file URL or key into an object key.

    For an absolute URL, the key is every path segment after the one that
    equals ``bucket``. Anything else, including a URL without the bucket
    segment, is used verbatim.
    """
    parsed = urlparse(file_url_or_path)
    if not (parsed.scheme and parsed.netloc):
        return file_url_or_path

    segments = parsed.path.split("/")
    if bucket in segments:
        index = segments.index(bucket)
        if len(segments) > index + 1:
            return "/".join(segments[index + 1:])
    return file_url_or_path


class DeletionService:
    """Deletes objects after confirming they exist."""

    def __init__(
        self,
        http_client: httpx.Client,
        config: DriveConfig,
        signer: MessageSigner,
    ):
        self.http_client = http_client
        self.config = config
        self.signer = signer

    def exists(self, bucket: str, key: str) -> bool:
        """Check whether ``key`` is listed for this signer in ``bucket``.

        Listing transport, status or parse failures count as "does not
        exist". Signer errors propagate.
        """
        owner = self.signer.identity()
        try:
            entries = fetch_entries(self.http_client, self.config, bucket, owner)
        except (ListFailed, ResponseParseFailed, httpx.HTTPError) as e:
            logger.warning(
                "Existence check for %s in %s failed, treating as missing: %s",
                key, bucket, e,
            )
            return False
        return any(
            isinstance(entry, dict) and entry.get("key") == key for entry in entries
        )

    def delete(self, bucket: str, file_url_or_path: str) -> DeleteResult:
        """Delete a file by URL or key.

        Args:
            bucket: Bucket identifier.
            file_url_or_path: Full file URL or object key.

        Returns:
            DeleteResult. ``success`` is False when the object is missing or
            the server declined the delete.

        Raises:
            DeleteFailed: If the delete endpoint returns a non-success status
                or an unreadable body.
        """
        key = resolve_object_key(bucket, file_url_or_path)

        if not self.exists(bucket, key):
            logger.info("Skipping delete of missing object %s in %s", key, bucket)
            return DeleteResult(success=False, message=NOT_FOUND_MESSAGE)

        logger.info("Deleting %s from %s", key, bucket)
        envelope = sign_envelope(self.signer, delete_message(bucket, key))

        response = self.http_client.post(
            self.config.url(DELETE_PATH),
            json={
                "bucket": bucket,
                "filename": key,
                "message": envelope.signature,
                "signer": envelope.signer,
            },
        )

        try:
            data: Any = response.json()
        except ValueError as e:
            raise DeleteFailed(
                "Failed to parse server response", response.status_code
            ) from e
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            raise DeleteFailed(data.get("error") or "Delete failed", response.status_code)

        if data.get("success") is False:
            return DeleteResult(
                success=False,
                message=data.get("error") or data.get("message") or "Delete rejected",
            )

        return DeleteResult(success=True, message=data.get("message") or DELETED_MESSAGE)
