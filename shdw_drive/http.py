"""HTTP client factory and response helpers.

Creates the httpx client used for every shdw-drive request and decodes
server responses. Any non-2xx status is a failure, whatever the payload.
"""

from typing import Any

import httpx

from shdw_drive.config import DriveConfig
from shdw_drive.errors import ResponseParseFailed

# Raw bodies are truncated to this many characters in error messages
ERROR_BODY_PREVIEW = 200


def build_http_client(config: DriveConfig) -> httpx.Client:
    """Build an httpx client for the given configuration.

    Args:
        config: Drive configuration with endpoint and optional timeout.

    Returns:
        An httpx.Client. With ``config.timeout`` unset no timeout applies.
    """
    return httpx.Client(timeout=config.timeout)


def parse_json(response: httpx.Response) -> Any:
    """Decode a JSON response body.

    Raises:
        ResponseParseFailed: If the body is not valid JSON.
    """
    try:
        return response.json()
    except ValueError as e:
        raise ResponseParseFailed(
            f"Failed to parse server response (status {response.status_code})"
        ) from e


def error_message(response: httpx.Response, default: str) -> str:
    """Extract the server-reported reason from a failed response.

    JSON bodies yield their ``error`` or ``message`` field. Other bodies
    yield a diagnostic with the status and a truncated preview.

    Args:
        response: The failed response.
        default: Message used when a JSON body names no reason.

    Returns:
        A human-readable error message.
    """
    content_type = response.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            data = response.json()
            if isinstance(data, dict):
                return data.get("error") or data.get("message") or default
            return default
        text = response.text
    except ValueError:
        return f"{default} - Status: {response.status_code}, Error parsing response"

    return (
        f"{default} - Status: {response.status_code}, "
        f"Response: {text[:ERROR_BODY_PREVIEW]}..."
    )
