# src/haproxy_tunnels/commands/proxy/app.py
"""HAProxy configuration commands.

haproxy.cfg is generated entirely from the tunnel state file; edits made
directly to /etc/haproxy/haproxy.cfg are overwritten on the next apply.
"""

from typing import Annotated

import cyclopts

from haproxy_tunnels import systemd
from haproxy_tunnels.config import Config
from haproxy_tunnels.exceptions import TunnelError
from haproxy_tunnels.operations import TunnelManager

from ..common import error_exit

app = cyclopts.App(
    name="proxy",
    help="Manage HAProxy configuration and service",
)

Check = Annotated[
    bool,
    cyclopts.Parameter(
        name=["--check", "-c"],
        negative=[],  # Disable --no-check generation
        help="Also run 'haproxy -c' on the rendered config (nothing is deployed)",
    ),
]

Short = Annotated[
    bool,
    cyclopts.Parameter(
        name=["--short", "-s"],
        negative=[],
        help="Print only 'active' or 'inactive'",
    ),
]

Lines = Annotated[
    int,
    cyclopts.Parameter(
        name=["--lines", "-n"],
        help="Number of log lines to show",
    ),
]


@app.command
def apply():
    """Regenerate haproxy.cfg from saved tunnels and restart HAProxy.

    Use after a failed restart or deploy, or after editing the state file
    by hand.
    """
    cfg = Config()
    try:
        output = TunnelManager(cfg).apply()
    except TunnelError as e:
        raise error_exit(e) from e
    if output:
        print(output)
    print(f"[ok] HAProxy configuration applied and {cfg.service} restarted")


@app.command
def health_check(port: Annotated[str, cyclopts.Parameter(help="Port number, or 'none' to disable")]):
    """Set the default health check port used for every tunnel.

    tcp tunnels connect to this port on each backend; http tunnels send
    GET / and expect 200. 'none' leaves tcp tunnels with a plain connect
    check and http tunnels unchecked.
    """
    cfg = Config()
    try:
        policy = TunnelManager(cfg).set_health_check_port(port)
    except TunnelError as e:
        raise error_exit(e) from e
    print(f"[ok] Default health check port set to: {policy.port or 'None'}")
    print(f"[ok] HAProxy configuration applied and {cfg.service} restarted")


@app.command
def render(check: Check = False):
    """Print the haproxy.cfg generated from saved tunnels.

    Nothing is written to the live config.
    """
    cfg = Config()
    manager = TunnelManager(cfg)
    try:
        document = manager.render()
        print(document)
        if check:
            output = manager.activator.check(document)
            if output:
                print(output)
            print(f"[ok] {cfg.staging_config} passed validation")
    except TunnelError as e:
        raise error_exit(e) from e


@app.command
def status(short: Short = False, lines: Lines = 25):
    """Show HAProxy service status."""
    cfg = Config()
    if short:
        print("active" if systemd.is_active(cfg.service) else "inactive")
        return
    systemd.status(cfg.service, lines=lines)
