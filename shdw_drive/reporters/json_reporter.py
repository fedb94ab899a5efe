"""JSON reporter for structured command output.

Collects the result of a command and writes it to a file, for scripts
that chain uploads and deletes.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from shdw_drive.models import DeleteResult, ObjectInfo, ProgressEvent, UploadOutcome
from shdw_drive.reporters.base import Reporter


class JsonReporter(Reporter):
    """JSON reporter for structured output.

    Args:
        output_path: File path to write JSON output
    """

    def __init__(self, output_path: str):
        self.output_path = output_path
        self._output: dict[str, Any] = {}

    def on_command_start(self, command: str, bucket: str, target: str) -> None:
        self._output = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "command": command,
            "bucket": bucket,
            "target": target,
        }

    def on_progress(self, event: ProgressEvent) -> None:
        """No-op: only final results are written."""
        pass

    def on_upload_complete(self, outcome: UploadOutcome) -> None:
        self._finish(True, result=outcome.to_dict())

    def on_delete_complete(self, result: DeleteResult) -> None:
        self._finish(result.success, result=result.to_dict())

    def on_list_complete(self, bucket: str, objects: list[ObjectInfo]) -> None:
        self._finish(
            True,
            result={
                "objects": [
                    {"key": o.key, "size": o.size, "lastModified": o.last_modified}
                    for o in objects
                ],
            },
        )

    def on_error(self, command: str, error: Exception) -> None:
        self._finish(
            False,
            error={"type": type(error).__name__, "message": str(error)},
        )

    def _finish(
        self,
        success: bool,
        result: Optional[dict] = None,
        error: Optional[dict] = None,
    ) -> dict:
        output = dict(self._output)
        output["success"] = success
        if result is not None:
            output["result"] = result
        if error is not None:
            output["error"] = error

        self._write_to_file(output)
        return output

    def _write_to_file(self, output: dict) -> None:
        path = Path(self.output_path)

        # Create parent directories if needed
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.output_path, "w") as f:
            json.dump(output, f, indent=2)
