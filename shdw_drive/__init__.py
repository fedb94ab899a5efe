"""
Shadow Drive client.

Uploads and deletes objects in a shdwDrive bucket, authenticating every
mutating request with an Ed25519 signature over a canonical message.
"""

__version__ = "1.0.0"

from shdw_drive.client import ShdwDriveClient
from shdw_drive.config import DriveConfig, load_config, load_keypair
from shdw_drive.signer import KeypairSigner, MessageSigner, WalletSigner, build_signer

__all__ = [
    "ShdwDriveClient",
    "DriveConfig",
    "load_config",
    "load_keypair",
    "MessageSigner",
    "KeypairSigner",
    "WalletSigner",
    "build_signer",
    "__version__",
]
