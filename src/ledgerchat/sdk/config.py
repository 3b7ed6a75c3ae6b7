"""Session configuration via dataclass (no pydantic -- instant construction)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from ledgerchat.protocol.types import (
    DEFAULT_EXPLORER_URL,
    DEFAULT_TRANSFER_LAMPORTS,
    LAMPORTS_PER_SOL,
    MAX_MEMO_BYTES,
    Commitment,
)

logger = logging.getLogger(__name__)

_DEFAULT_RPC_URL = "https://api.devnet.solana.com"

_VALID_FUND_POLICIES = {"startup", "every-send"}


def cluster_from_url(rpc_url: str) -> str:
    """Guess the explorer cluster name from an RPC endpoint URL."""
    host = urlparse(rpc_url).hostname or ""
    if "devnet" in host:
        return "devnet"
    if "testnet" in host:
        return "testnet"
    if "mainnet" in host:
        return "mainnet-beta"
    if host in ("localhost", "127.0.0.1"):
        return "custom"
    return "devnet"


@dataclass
class ChatConfig:
    """Configuration for a ledgerchat session.

    All fields have sensible defaults.  Endpoint, cluster, recipient, key
    location and funding policy can be overridden via ``LEDGERCHAT_*``
    environment variables or constructor arguments.

    Priority (highest wins): constructor arg > env var > config.toml > default.
    """

    rpc_url: str | None = None
    cluster: str | None = None
    recipient: str | None = None
    key_path: Path | str | None = None
    data_dir: Path | str | None = None
    explorer_url: str = DEFAULT_EXPLORER_URL
    commitment: str = Commitment.CONFIRMED.value
    transfer_lamports: int = DEFAULT_TRANSFER_LAMPORTS
    fund_threshold: int = LAMPORTS_PER_SOL // 100
    top_up_lamports: int = LAMPORTS_PER_SOL
    max_memo_bytes: int = MAX_MEMO_BYTES
    fund_policy: str | None = None
    poll_interval: float = 1.0
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        # LEDGERCHAT_HOME overrides ~/.ledgerchat (useful for testing / isolation).
        home = os.getenv("LEDGERCHAT_HOME")
        default_home = Path(home) if home else Path.home() / ".ledgerchat"

        if self.data_dir is None:
            self.data_dir = default_home
        else:
            self.data_dir = Path(self.data_dir)

        # Optional config.toml (lowest priority -- only fills gaps)
        config_path = Path(self.data_dir) / "config.toml"
        file_values = self._load_config_file(config_path) if config_path.exists() else {}

        if self.rpc_url is None:
            self.rpc_url = os.getenv(
                "LEDGERCHAT_RPC_URL", file_values.get("rpc_url", _DEFAULT_RPC_URL)
            )

        if self.cluster is None:
            self.cluster = (
                os.getenv("LEDGERCHAT_CLUSTER")
                or file_values.get("cluster")
                or cluster_from_url(self.rpc_url)
            )

        if self.recipient is None:
            self.recipient = os.getenv(
                "LEDGERCHAT_RECIPIENT", file_values.get("recipient")
            )

        if self.key_path is None:
            env_key = os.getenv("LEDGERCHAT_KEY_PATH") or file_values.get("key_path")
            self.key_path = (
                Path(env_key).expanduser() if env_key
                else Path(self.data_dir) / "id.json"
            )
        else:
            self.key_path = Path(self.key_path)

        if self.fund_policy is None:
            self.fund_policy = os.getenv(
                "LEDGERCHAT_FUND_POLICY", file_values.get("fund_policy", "startup")
            )

        if self.fund_policy not in _VALID_FUND_POLICIES:
            raise ValueError(
                f"Invalid fund_policy '{self.fund_policy}'. "
                f"Must be one of: {sorted(_VALID_FUND_POLICIES)}"
            )

        try:
            self.commitment = Commitment(self.commitment).value
        except ValueError:
            raise ValueError(
                f"Invalid commitment '{self.commitment}'. "
                f"Must be one of: {[c.value for c in Commitment]}"
            ) from None

    @property
    def is_production(self) -> bool:
        """Whether the configured cluster has no faucet."""
        return self.cluster == "mainnet-beta"

    def _load_config_file(self, path: Path) -> dict:
        """Load optional config.toml and return its ``[chat]`` table."""
        try:
            import tomllib
        except ModuleNotFoundError:
            import tomli as tomllib  # type: ignore[no-redef]  # Python 3.10 fallback

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except Exception:
            logger.warning("Failed to load config file %s", path, exc_info=True)
            return {}

        return data.get("chat", {})
