"""Configuration loading for the shdw-drive client.

Supports two configuration sources, in priority order:
1. Explicit arguments (for example from the command line)
2. Environment variables

Environment Variables:
    SHDW_ENDPOINT=https://v2.shdwdrive.com
    SHDW_TIMEOUT=60

Keypairs are read from Solana CLI keypair files: a JSON array of the 64
secret key bytes.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from shdw_drive.signer import KeypairSigner, SECRET_KEY_LENGTH

DEFAULT_ENDPOINT = "https://v2.shdwdrive.com"
ENDPOINT_ENV_VAR = "SHDW_ENDPOINT"
TIMEOUT_ENV_VAR = "SHDW_TIMEOUT"


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


@dataclass(frozen=True)
class DriveConfig:
    """Connection settings for a shdw-drive endpoint.

    ``timeout`` of None leaves requests without a client-side deadline.
    """

    endpoint: str = DEFAULT_ENDPOINT
    timeout: Optional[float] = None

    def url(self, path: str) -> str:
        """Join an API path onto the endpoint."""
        return f"{self.endpoint}/{path.lstrip('/')}"


def _validate_endpoint(endpoint: str) -> str:
    endpoint = endpoint.strip().rstrip("/")
    parsed = urlparse(endpoint)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid endpoint URL: {endpoint!r}")
    return endpoint


def _load_timeout() -> Optional[float]:
    raw = os.environ.get(TIMEOUT_ENV_VAR)
    if not raw:
        return None

    try:
        timeout = float(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid {TIMEOUT_ENV_VAR}: {raw!r}") from e

    if timeout <= 0:
        raise ConfigError(f"{TIMEOUT_ENV_VAR} must be positive, got {raw!r}")
    return timeout


def load_config(endpoint: Optional[str] = None) -> DriveConfig:
    """Load client configuration.

    Args:
        endpoint: Explicit endpoint; overrides ``SHDW_ENDPOINT``.

    Returns:
        The resolved DriveConfig.

    Raises:
        ConfigError: If the endpoint is not an http(s) URL or the timeout
            is malformed.
    """
    raw_endpoint = endpoint or os.environ.get(ENDPOINT_ENV_VAR) or DEFAULT_ENDPOINT
    return DriveConfig(
        endpoint=_validate_endpoint(raw_endpoint),
        timeout=_load_timeout(),
    )


def load_keypair(keypair_path: str) -> KeypairSigner:
    """Load a signer from a Solana keypair JSON file.

    Args:
        keypair_path: Path to the keypair file.

    Returns:
        A KeypairSigner for the key in the file.

    Raises:
        ConfigError: If the file doesn't exist, contains invalid JSON,
                    or does not hold 64 byte values.
    """
    path = Path(keypair_path)

    if not path.exists():
        raise ConfigError(f"Keypair file not found: {keypair_path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in keypair file: {e}") from e

    if (
        not isinstance(data, list)
        or len(data) != SECRET_KEY_LENGTH
        or not all(isinstance(b, int) and 0 <= b <= 255 for b in data)
    ):
        raise ConfigError(
            f"Keypair file must contain a JSON array of {SECRET_KEY_LENGTH} bytes"
        )

    try:
        return KeypairSigner.from_secret_key(bytes(data))
    except ValueError as e:
        raise ConfigError(f"Invalid keypair: {e}") from e
