"""Base reporter interface."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shdw_drive.models import DeleteResult, ObjectInfo, ProgressEvent, UploadOutcome


class Reporter(ABC):
    """Abstract base class for command result reporters.

    ``on_progress`` has the signature of an upload progress sink, so a
    reporter's bound method can be handed straight to an upload.
    """

    @abstractmethod
    def on_command_start(self, command: str, bucket: str, target: str) -> None:
        """Called before a command talks to the server."""
        pass

    @abstractmethod
    def on_progress(self, event: "ProgressEvent") -> None:
        """Called for each upload progress event."""
        pass

    @abstractmethod
    def on_upload_complete(self, outcome: "UploadOutcome") -> None:
        """Called when an upload has been finalized."""
        pass

    @abstractmethod
    def on_delete_complete(self, result: "DeleteResult") -> None:
        """Called with the outcome of a delete, successful or not."""
        pass

    @abstractmethod
    def on_list_complete(self, bucket: str, objects: list["ObjectInfo"]) -> None:
        """Called with the objects of a bucket listing."""
        pass

    @abstractmethod
    def on_error(self, command: str, error: Exception) -> None:
        """Called when a command fails with an error."""
        pass
