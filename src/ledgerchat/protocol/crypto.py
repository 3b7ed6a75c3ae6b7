"""Ed25519 identity primitives for ledgerchat.

Wraps PyNaCl (libsodium) for key generation and signing.  Solana accounts
are plain Ed25519 keys, so a PyNaCl ``SigningKey`` seed and a Solana CLI
keypair describe the same identity.

This module never hand-rolls crypto -- every operation delegates to PyNaCl.
"""

from __future__ import annotations

import json

import base58
import nacl.exceptions
from nacl.signing import SigningKey
from solders.pubkey import Pubkey
from solders.signature import Signature

from ledgerchat.protocol.errors import InvalidKeyError
from ledgerchat.protocol.types import shorten_address


class Identity:
    """The sender's signing identity.

    The signing key stays inside this object.  Callers get the public
    address and a ``sign()`` capability, never the key material itself.
    """

    __slots__ = ("_signing_key", "_pubkey")

    def __init__(self, signing_key: SigningKey) -> None:
        self._signing_key = signing_key
        self._pubkey = Pubkey.from_bytes(bytes(signing_key.verify_key))

    @classmethod
    def generate(cls) -> Identity:
        """Create a fresh random identity."""
        return cls(SigningKey.generate())

    @property
    def pubkey(self) -> Pubkey:
        return self._pubkey

    @property
    def public_address(self) -> str:
        """Base58 public address, safe to display and transmit."""
        return str(self._pubkey)

    @property
    def short_address(self) -> str:
        return shorten_address(self._pubkey)

    def sign(self, data: bytes) -> Signature:
        """Sign *data* with the Ed25519 signing key."""
        signed = self._signing_key.sign(data)
        return Signature.from_bytes(signed.signature)

    def __repr__(self) -> str:
        return f"Identity({self.public_address!r})"


# ---------------------------------------------------------------------------
# Serialization (Solana CLI keypair formats)
# ---------------------------------------------------------------------------

def identity_from_keypair_bytes(raw: bytes) -> Identity:
    """Restore an identity from 64 bytes: 32-byte seed + 32-byte public key.

    Raises:
        InvalidKeyError: If the length is wrong or the public half does not
            match the seed.
    """
    if len(raw) != 64:
        raise InvalidKeyError(f"Keypair must be 64 bytes, got {len(raw)}")
    try:
        signing_key = SigningKey(raw[:32])
    except (nacl.exceptions.CryptoError, TypeError, ValueError) as exc:
        raise InvalidKeyError(str(exc)) from exc
    if bytes(signing_key.verify_key) != raw[32:]:
        raise InvalidKeyError("Public key does not match secret seed")
    return Identity(signing_key)


def identity_from_json(text: str) -> Identity:
    """Restore an identity from a Solana CLI keypair file (JSON byte array)."""
    try:
        values = json.loads(text)
        raw = bytes(values)
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        raise InvalidKeyError(f"Malformed keypair file: {exc}") from exc
    return identity_from_keypair_bytes(raw)


def identity_from_base58(secret: str) -> Identity:
    """Restore an identity from a base58-encoded 64-byte secret key."""
    try:
        raw = base58.b58decode(secret.strip())
    except ValueError as exc:
        raise InvalidKeyError(f"Malformed base58 secret key: {exc}") from exc
    return identity_from_keypair_bytes(raw)


def identity_to_json(identity: Identity) -> str:
    """Serialize to the Solana CLI keypair file format."""
    seed = identity._signing_key.encode()
    return json.dumps(list(seed + bytes(identity.pubkey)))
