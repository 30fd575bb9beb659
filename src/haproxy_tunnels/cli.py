# src/haproxy_tunnels/cli.py

"""
Manage HAProxy port-forwarding tunnels.

Usage:

    haproxy-tunnels init
    haproxy-tunnels tunnel add 10.0.0.1,10.0.0.2 80,443
    haproxy-tunnels tunnel edit 0 --ports 80,443,8443
    haproxy-tunnels tunnel rm 0
    haproxy-tunnels proxy health-check 80
    haproxy-tunnels proxy apply

    # Or run directly without installing:
    $ pip install -e .
    $ python -m haproxy_tunnels.cli tunnel ls
"""

import json

import cyclopts

from . import __version__, state_file
from .commands import init, proxy, telegram, tunnel
from .commands.common import error_exit
from .config import Config
from .exceptions import TunnelError

app = cyclopts.App(
    name="haproxy-tunnels",
    help="Manage HAProxy port-forwarding tunnels",
    version=__version__,
)

# Register topic sub-apps
app.command(init.app)
app.command(tunnel.app)
app.command(proxy.app)
app.command(telegram.app)


@app.default
def _default():
    """Show help when no command is specified."""
    app.help_print([])


# Root-level commands for quick access
@app.command
def ls():
    """List tunnels (same as 'tunnel ls')."""
    tunnel.list_tunnels()


@app.command
def export():
    """Print the full saved state as JSON (tunnels, health check, bot settings)."""
    try:
        tunnel_set = state_file.load(Config().data_file)
    except TunnelError as e:
        raise error_exit(e) from e
    print(json.dumps(state_file.export(tunnel_set)))


if __name__ == "__main__":
    app()
