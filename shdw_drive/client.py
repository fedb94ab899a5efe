"""High-level shdw-drive client.

Wires the signer, HTTP client, upload orchestrator and deletion service
together behind one object. A client handles one call at a time.
"""

from pathlib import Path
from typing import Optional

import httpx

from shdw_drive.config import DriveConfig
from shdw_drive.deletion import DeletionService
from shdw_drive.http import build_http_client
from shdw_drive.listing import list_objects
from shdw_drive.models import DeleteResult, ObjectInfo, UploadOutcome
from shdw_drive.signer import MessageSigner
from shdw_drive.uploader import ProgressSink, UploadOrchestrator


class ShdwDriveClient:
    """Authenticated upload, delete and listing calls against one endpoint.

    Can be used as a context manager; an HTTP client created here is closed
    on exit, an injected one is left to its owner.
    """

    def __init__(
        self,
        config: DriveConfig,
        signer: MessageSigner,
        http_client: Optional[httpx.Client] = None,
    ):
        """Initialize the client.

        Args:
            config: Drive configuration
            signer: The single signing mechanism for this client
            http_client: Optional httpx client; one is built from
                ``config`` when omitted
        """
        self.config = config
        self.signer = signer
        self._owns_http_client = http_client is None
        self.http_client = http_client if http_client is not None else build_http_client(config)
        self._uploader = UploadOrchestrator(self.http_client, config, signer)
        self._deleter = DeletionService(self.http_client, config, signer)

    def upload_file(
        self,
        bucket: str,
        data: bytes,
        file_name: str,
        mime_type: Optional[str] = None,
        directory: Optional[str] = None,
        on_progress: Optional[ProgressSink] = None,
    ) -> UploadOutcome:
        """Upload in-memory file contents. See UploadOrchestrator.upload."""
        return self._uploader.upload(
            bucket,
            data,
            file_name,
            mime_type=mime_type,
            directory=directory,
            on_progress=on_progress,
        )

    def upload_path(
        self,
        bucket: str,
        file_path: str,
        mime_type: Optional[str] = None,
        directory: Optional[str] = None,
        on_progress: Optional[ProgressSink] = None,
    ) -> UploadOutcome:
        """Upload a local file under its own base name."""
        path = Path(file_path)
        return self.upload_file(
            bucket,
            path.read_bytes(),
            path.name,
            mime_type=mime_type,
            directory=directory,
            on_progress=on_progress,
        )

    def delete_file(self, bucket: str, file_url_or_path: str) -> DeleteResult:
        return self._deleter.delete(bucket, file_url_or_path)

    def list_files(self, bucket: str) -> list[ObjectInfo]:
        return list_objects(self.http_client, self.config, bucket, self.signer.identity())

    def close(self) -> None:
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "ShdwDriveClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False
