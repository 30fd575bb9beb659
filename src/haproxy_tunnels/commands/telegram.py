# src/haproxy_tunnels/commands/telegram.py
"""Telegram bot credential commands.

The bot reads its token and admin id from the same state file as the
tunnels (see 'haproxy-tunnels export'). Changing them does not touch
haproxy.cfg.
"""

from typing import Annotated

import cyclopts

from ..config import Config
from ..exceptions import TunnelError
from ..operations import TunnelManager
from .common import error_exit

app = cyclopts.App(name="telegram", help="Configure remote control bot credentials")


def mask(token: str) -> str:
    """Show only the bot id part of a token (123456:ABC... -> 123456:***)."""
    if not token:
        return "(not set)"
    bot_id, sep, _ = token.partition(":")
    return f"{bot_id}{sep}***" if sep else "***"


@app.command(name="set")
def set_credentials(
    token: Annotated[
        str | None,
        cyclopts.Parameter(name=["--token", "-t"], help="Bot token from @BotFather"),
    ] = None,
    admin_id: Annotated[
        str | None,
        cyclopts.Parameter(
            name=["--admin-id", "-a"],
            help="Numeric Telegram user ID allowed to use the bot (empty for no restriction)",
        ),
    ] = None,
):
    """Save the bot token and/or admin ID."""
    if token is None and admin_id is None:
        raise SystemExit("[error] Nothing to set: pass --token and/or --admin-id")
    try:
        TunnelManager(Config()).set_telegram(token=token, admin_id=admin_id)
    except TunnelError as e:
        raise error_exit(e) from e
    print("[ok] Telegram bot settings saved")


@app.command
def show():
    """Show the saved bot settings (token masked)."""
    try:
        settings = TunnelManager(Config()).list().telegram
    except TunnelError as e:
        raise error_exit(e) from e
    print(f"Bot token: {mask(settings.bot_token)}")
    print(f"Admin ID:  {settings.admin_id or '(no restriction)'}")
