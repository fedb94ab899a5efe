"""Message signing for authenticated shdw-drive requests.

Two signing mechanisms are supported, exactly one per client:

- A wallet-style adapter exposing ``public_key`` and, optionally,
  ``sign_message(bytes) -> bytes``.
- A raw Ed25519 keypair (PyNaCl ``SigningKey``).

Signatures always leave this module base58-encoded; the server rejects
base64 or hex.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import base58
from nacl.signing import SigningKey

from shdw_drive.errors import NoSigner, NoSigningMethod

logger = logging.getLogger(__name__)

SEED_LENGTH = 32
SECRET_KEY_LENGTH = 64


class MessageSigner(ABC):
    """Produces detached signatures and the signer identity."""

    @abstractmethod
    def sign(self, message: str) -> str:
        """Sign the UTF-8 bytes of ``message``.

        Returns:
            The base58-encoded detached signature.
        """
        pass

    @abstractmethod
    def identity(self) -> str:
        """Return the signer's public key string."""
        pass


class WalletSigner(MessageSigner):
    """Signer backed by a wallet adapter.

    The adapter must expose ``public_key``. Signing additionally needs a
    callable ``sign_message``; a read-only wallet can still identify itself
    but raises :class:`NoSigningMethod` when asked to sign. The public key is
    read once, at construction.
    """

    def __init__(self, wallet: Any):
        self.wallet = wallet
        public_key = getattr(wallet, "public_key", None)
        self._public_key = str(public_key) if public_key else ""

    def sign(self, message: str) -> str:
        sign_message = getattr(self.wallet, "sign_message", None)
        if not callable(sign_message):
            raise NoSigningMethod()
        signature = sign_message(message.encode("utf-8"))
        return base58.b58encode(bytes(signature)).decode("ascii")

    def identity(self) -> str:
        if not self._public_key:
            raise NoSigner()
        return self._public_key


class KeypairSigner(MessageSigner):
    """Signer backed by a raw Ed25519 keypair."""

    def __init__(self, signing_key: SigningKey):
        self.signing_key = signing_key

    @classmethod
    def from_secret_key(cls, secret_key: bytes) -> "KeypairSigner":
        """Build a signer from Solana-style secret key material.

        Args:
            secret_key: Either the 64-byte secret key (seed followed by the
                public key) or a bare 32-byte seed.

        Raises:
            ValueError: If the key material has any other length, or the
                embedded public key does not match the seed.
        """
        secret_key = bytes(secret_key)
        if len(secret_key) not in (SEED_LENGTH, SECRET_KEY_LENGTH):
            raise ValueError(
                f"Secret key must be {SEED_LENGTH} or {SECRET_KEY_LENGTH} bytes, "
                f"got {len(secret_key)}"
            )

        signing_key = SigningKey(secret_key[:SEED_LENGTH])
        if len(secret_key) == SECRET_KEY_LENGTH:
            if signing_key.verify_key.encode() != secret_key[SEED_LENGTH:]:
                raise ValueError("Secret key public half does not match its seed")
        return cls(signing_key)

    def sign(self, message: str) -> str:
        signed = self.signing_key.sign(message.encode("utf-8"))
        return base58.b58encode(signed.signature).decode("ascii")

    def identity(self) -> str:
        return base58.b58encode(self.signing_key.verify_key.encode()).decode("ascii")


def build_signer(
    wallet: Optional[Any] = None,
    keypair: Optional[Any] = None,
) -> MessageSigner:
    """Select the single signing mechanism for a client.

    Args:
        wallet: Wallet adapter exposing ``public_key`` and ``sign_message``.
        keypair: A ``SigningKey``, an existing ``KeypairSigner``, or raw
            secret key bytes.

    Returns:
        The configured signer.

    Raises:
        ValueError: If both a wallet and a keypair are supplied.
        NoSigner: If neither is supplied, or the wallet has no public key.
    """
    if wallet is not None and keypair is not None:
        raise ValueError("Supply either a wallet or a keypair, not both")

    if wallet is not None:
        logger.debug("Using wallet signer")
        signer = WalletSigner(wallet)
        signer.identity()
        return signer

    if keypair is None:
        raise NoSigner()

    logger.debug("Using keypair signer")
    if isinstance(keypair, KeypairSigner):
        return keypair
    if isinstance(keypair, SigningKey):
        return KeypairSigner(keypair)
    return KeypairSigner.from_secret_key(bytes(keypair))
