"""Tests for canonical message construction."""

import hashlib
from unittest.mock import Mock

from shdw_drive.messages import (
    delete_message,
    file_name_hash,
    multipart_init_message,
    sign_envelope,
    upload_message,
)


class TestTemplates:
    """Tests for the exact message templates."""

    def test_upload_message(self):
        """Upload message binds the bucket and the file name hash."""
        expected_hash = hashlib.sha256(b"x.txt").hexdigest()
        assert upload_message("B", "x.txt") == (
            "shdwDrive Signed Message:\n"
            "Storage Account: B\n"
            f"Upload file with hash: {expected_hash}"
        )

    def test_multipart_init_message(self):
        """Init message names bucket, key and size."""
        assert multipart_init_message("B", "dir/big.bin", 12582912) == (
            "shdwDrive Signed Message:\n"
            "Initialize multipart upload\n"
            "Bucket: B\n"
            "Filename: dir/big.bin\n"
            "File size: 12582912"
        )

    def test_delete_message(self):
        """Delete message names bucket and key."""
        assert delete_message("B", "folder/file.jpg") == (
            "shdwDrive Signed Message:\n"
            "Delete file\n"
            "Bucket: B\n"
            "Filename: folder/file.jpg"
        )

    def test_hash_ignores_contents(self):
        """Hash covers the name only, as lowercase hex."""
        assert file_name_hash("a.txt") == hashlib.sha256(b"a.txt").hexdigest()
        assert file_name_hash("a.txt") == file_name_hash("a.txt").lower()

    def test_messages_are_deterministic(self):
        """Repeated calls produce identical messages."""
        assert upload_message("B", "f") == upload_message("B", "f")
        assert multipart_init_message("B", "k", 1) == multipart_init_message("B", "k", 1)
        assert delete_message("B", "k") == delete_message("B", "k")


class TestSignEnvelope:
    """Tests for sign_envelope."""

    def test_envelope_fields(self):
        """Envelope carries the message, signature and signer identity."""
        signer = Mock()
        signer.sign.return_value = "sig"
        signer.identity.return_value = "pub"

        envelope = sign_envelope(signer, "msg")

        signer.sign.assert_called_once_with("msg")
        assert envelope.message == "msg"
        assert envelope.signature == "sig"
        assert envelope.signer == "pub"
