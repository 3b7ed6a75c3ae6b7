"""ledgerchat ledger client layer."""

from ledgerchat.sdk.transport.base import LedgerClientBase
from ledgerchat.sdk.transport.rpc import RpcLedgerClient


def create_client(config) -> LedgerClientBase:
    """Factory to create the ledger client for the configured endpoint."""
    return RpcLedgerClient(
        config.rpc_url,
        cluster=config.cluster,
        commitment=config.commitment,
        poll_interval=config.poll_interval,
        timeout=config.request_timeout,
    )


__all__ = [
    "LedgerClientBase",
    "RpcLedgerClient",
    "create_client",
]
