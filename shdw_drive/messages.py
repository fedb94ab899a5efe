"""Canonical messages signed for each mutating request.

The server rebuilds these strings independently and verifies the signature
against them, so every template here must stay byte-for-byte stable.
"""

import hashlib

from shdw_drive.models import SignedEnvelope
from shdw_drive.signer import MessageSigner

MESSAGE_HEADER = "shdwDrive Signed Message:"


def file_name_hash(file_name: str) -> str:
    """Hex SHA-256 of the file name (not the file contents)."""
    return hashlib.sha256(file_name.encode("utf-8")).hexdigest()


def upload_message(bucket: str, file_name: str) -> str:
    return (
        f"{MESSAGE_HEADER}\n"
        f"Storage Account: {bucket}\n"
        f"Upload file with hash: {file_name_hash(file_name)}"
    )


def multipart_init_message(bucket: str, key: str, size: int) -> str:
    return (
        f"{MESSAGE_HEADER}\n"
        "Initialize multipart upload\n"
        f"Bucket: {bucket}\n"
        f"Filename: {key}\n"
        f"File size: {size}"
    )


def delete_message(bucket: str, key: str) -> str:
    return (
        f"{MESSAGE_HEADER}\n"
        "Delete file\n"
        f"Bucket: {bucket}\n"
        f"Filename: {key}"
    )


def sign_envelope(signer: MessageSigner, message: str) -> SignedEnvelope:
    """Sign ``message`` and bundle it with the signer identity."""
    return SignedEnvelope(
        message=message,
        signature=signer.sign(message),
        signer=signer.identity(),
    )
