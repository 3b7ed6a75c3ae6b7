"""Sender identity provisioning: keypair files, env secrets, in-memory keys.

The session depends only on the abstract :class:`IdentityProvider`; secret
material is supplied at runtime and never baked into the package.
"""

from __future__ import annotations

import abc
import logging
import os
import platform
import stat
import warnings
from pathlib import Path

from ledgerchat.protocol import (
    Identity,
    IdentityError,
    identity_from_base58,
    identity_from_json,
    identity_to_json,
)

logger = logging.getLogger(__name__)

SECRET_KEY_ENV = "LEDGERCHAT_SECRET_KEY"


class IdentityProvider(abc.ABC):
    """Source of the sender's signing identity."""

    @abc.abstractmethod
    def load(self) -> Identity:
        """Return the sender identity.  Raises ``IdentityError`` on failure."""


class StaticIdentityProvider(IdentityProvider):
    """Wraps an identity that already lives in memory."""

    def __init__(self, identity: Identity) -> None:
        self._identity = identity

    def load(self) -> Identity:
        return self._identity


class EnvIdentityProvider(IdentityProvider):
    """Reads a base58 64-byte secret key from an environment variable."""

    def __init__(self, var: str = SECRET_KEY_ENV) -> None:
        self._var = var

    def load(self) -> Identity:
        secret = os.getenv(self._var)
        if not secret:
            raise IdentityError(f"Environment variable {self._var} is not set")
        return identity_from_base58(secret)


class KeyFileIdentityProvider(IdentityProvider):
    """Manages a Solana CLI keypair file (JSON array of 64 bytes).

    First-run (``generate=True``): creates the keypair, writes it, sets 600
    permissions.  Returning user: loads from disk, warns if permissions are
    too permissive.
    """

    def __init__(self, path: Path | str, *, generate: bool = False) -> None:
        self._path = Path(path)
        self._generate = generate
        self._identity: Identity | None = None

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Identity:
        if self._identity is not None:
            return self._identity

        if self._path.exists():
            self._check_permissions(self._path)
            self._identity = identity_from_json(self._path.read_text())
        elif self._generate:
            self._identity = self.create()
        else:
            raise IdentityError(
                f"No keypair at {self._path}. Run `ledgerchat init` first."
            )
        return self._identity

    def create(self) -> Identity:
        """Generate a new keypair and write it to :attr:`path`.

        Raises ``IdentityError`` if the file already exists.
        """
        if self._path.exists():
            raise IdentityError(f"Keypair file {self._path} already exists")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        identity = Identity.generate()
        self._path.write_text(identity_to_json(identity))
        self._set_permissions(self._path)
        logger.info("Generated new keypair %s at %s", identity.public_address, self._path)
        self._identity = identity
        return identity

    def _set_permissions(self, path: Path) -> None:
        """Set file permissions to 600 (owner read/write only)."""
        if platform.system() != "Windows":
            os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)

    def _check_permissions(self, path: Path) -> None:
        """Warn if key file permissions are too permissive."""
        if platform.system() == "Windows":
            return  # Cannot reliably check on Windows
        mode = path.stat().st_mode & 0o777
        if mode != 0o600:
            warnings.warn(
                f"Key file {path} has permissions {oct(mode)} (expected 0o600). "
                f"Run: chmod 600 {path}",
                stacklevel=2,
            )


def default_identity_provider(key_path: Path | str) -> IdentityProvider:
    """``LEDGERCHAT_SECRET_KEY`` when set, otherwise the keypair file."""
    if os.getenv(SECRET_KEY_ENV):
        return EnvIdentityProvider()
    return KeyFileIdentityProvider(key_path)
