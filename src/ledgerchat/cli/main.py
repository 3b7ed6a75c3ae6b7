"""ledgerchat CLI -- a terminal front end for a chat session.

Thin wrapper around the SDK using click.  Each command runs one coroutine
through the sync bridge so the ledger client lives on a single event loop.
"""

from __future__ import annotations

import asyncio
import logging

import click

from ledgerchat.protocol import LAMPORTS_PER_SOL, LedgerChatError
from ledgerchat.sdk._sync import _run_sync
from ledgerchat.sdk.config import ChatConfig
from ledgerchat.sdk.funding import FundingGuard
from ledgerchat.sdk.identity import KeyFileIdentityProvider, default_identity_provider
from ledgerchat.sdk.session import ChatSession, Notification
from ledgerchat.sdk.transport import create_client


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(msg: str) -> None:
    """Print an error message to stderr and exit 1."""
    click.echo(msg, err=True)
    raise SystemExit(1)


def _config(ctx: click.Context) -> ChatConfig:
    try:
        return ChatConfig(
            rpc_url=ctx.obj.get("rpc_url"),
            recipient=ctx.obj.get("recipient"),
            key_path=ctx.obj.get("key_path"),
        )
    except ValueError as exc:
        _error(f"Error: {exc}")


def _echo_notification(notification: Notification) -> None:
    click.echo(f"[{notification.title}] {notification.body}", err=notification.category is not None)


def _sol(lamports: int) -> str:
    return f"{lamports / LAMPORTS_PER_SOL:.9f} SOL"


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="ledgerchat")
@click.option("--rpc-url", default=None, help="RPC endpoint (default: Solana devnet).")
@click.option("--to", "recipient", default=None, help="Recipient address (base58).")
@click.option("--key-path", default=None, type=click.Path(dir_okay=False), help="Keypair file.")
@click.option("--verbose", "-v", is_flag=True, help="Log ledger activity to stderr.")
@click.pass_context
def cli(
    ctx: click.Context,
    rpc_url: str | None,
    recipient: str | None,
    key_path: str | None,
    verbose: bool,
) -> None:
    """ledgerchat -- chat over Solana memo transactions."""
    ctx.ensure_object(dict)
    ctx.obj.update(rpc_url=rpc_url, recipient=recipient, key_path=key_path)
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ---------------------------------------------------------------------------
# ledgerchat init
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Generate a sender keypair file (offline)."""
    cfg = _config(ctx)
    provider = KeyFileIdentityProvider(cfg.key_path)
    if provider.exists():
        identity = provider.load()
        click.echo(f"Keypair already exists: {identity.public_address}")
        click.echo(f"Key file: {provider.path}")
        return
    identity = provider.create()
    click.echo(f"Created keypair: {identity.public_address}")
    click.echo(f"Key file: {provider.path}")


# ---------------------------------------------------------------------------
# ledgerchat address
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def address(ctx: click.Context) -> None:
    """Display the sender address (offline)."""
    cfg = _config(ctx)
    try:
        identity = default_identity_provider(cfg.key_path).load()
    except LedgerChatError as exc:
        _error(f"Error: {exc}")
    click.echo(f"Address: {identity.public_address}")
    click.echo(f"Cluster: {cfg.cluster}")


# ---------------------------------------------------------------------------
# ledgerchat balance / fund
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def balance(ctx: click.Context) -> None:
    """Show the sender balance."""
    cfg = _config(ctx)

    async def _balance() -> int:
        identity = default_identity_provider(cfg.key_path).load()
        async with create_client(cfg) as client:
            return await client.get_balance(identity.public_address)

    try:
        lamports = _run_sync(_balance())
    except LedgerChatError as exc:
        _error(f"Error: {exc}")
    click.echo(f"Balance: {lamports} lamports ({_sol(lamports)})")


@cli.command()
@click.pass_context
def fund(ctx: click.Context) -> None:
    """Top the sender up from the faucet if the balance is low."""
    cfg = _config(ctx)

    async def _fund() -> bool:
        identity = default_identity_provider(cfg.key_path).load()
        async with create_client(cfg) as client:
            guard = FundingGuard(
                client, threshold=cfg.fund_threshold, top_up=cfg.top_up_lamports
            )
            return await guard.ensure_funded(identity)

    try:
        topped_up = _run_sync(_fund())
    except LedgerChatError as exc:
        _error(f"Error: {exc}")
    if topped_up:
        click.echo(f"Airdrop of {_sol(cfg.top_up_lamports)} confirmed.")
    else:
        click.echo("Balance above threshold, no airdrop needed.")


# ---------------------------------------------------------------------------
# ledgerchat send / chat
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("message")
@click.pass_context
def send(ctx: click.Context, message: str) -> None:
    """Send one message to the recipient."""
    if not message.strip():
        _error("Error: message is empty.")
    session = ChatSession(_config(ctx), on_notify=_echo_notification)

    async def _send():
        async with session:
            return await session.send_and_wait(message)

    try:
        result = _run_sync(_send())
    except LedgerChatError as exc:
        _error(f"Error: {exc}")
    if not result.ok:
        raise SystemExit(1)
    click.echo(result.record.display_text)
    click.echo(result.record.proof_reference)


@cli.command()
@click.pass_context
def chat(ctx: click.Context) -> None:
    """Interactive chat: one message per line, /quit to leave."""
    session = ChatSession(_config(ctx), on_notify=_echo_notification)

    async def _loop() -> None:
        async with session:
            click.echo(session.sender_label)
            click.echo(session.recipient_label)
            while True:
                line = await asyncio.to_thread(
                    click.prompt, "message", default=session.draft, show_default=False
                )
                if line.strip() == "/quit":
                    return
                if not line.strip():
                    continue
                session.draft = line
                result = await session.send_and_wait()
                if result.ok:
                    click.echo(f"{result.record.display_text}  <{result.record.proof_reference}>")

    try:
        _run_sync(_loop())
    except LedgerChatError as exc:
        _error(f"Error: {exc}")
    except click.Abort:
        click.echo()
