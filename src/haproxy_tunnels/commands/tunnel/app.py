# src/haproxy_tunnels/commands/tunnel/app.py
"""Tunnel management commands.

Every change is saved to the state file first, then rendered into
haproxy.cfg, checked with 'haproxy -c' and activated with a service
restart. A rejected config never reaches the live path.
"""

import json

import cyclopts

from haproxy_tunnels.config import Config
from haproxy_tunnels.exceptions import TunnelError
from haproxy_tunnels.operations import TunnelManager

from ..common import JsonOutput, Yes, error_exit
from ._helpers import confirm, print_tunnels
from .annotations import (
    Addresses,
    Mode,
    OptionalAddresses,
    OptionalMode,
    OptionalPorts,
    Ports,
    TunnelId,
)

app = cyclopts.App(
    name=["tunnel", "tunnels"],
    help="Manage port-forwarding tunnels (list, add, edit, rm)",
)


def _applied(cfg: Config) -> None:
    print(f"[ok] HAProxy configuration applied and {cfg.service} restarted")


@app.default
@app.command(name="ls")
def list_tunnels(json_output: JsonOutput = False):
    """List tunnels with their ids, ports and modes."""
    manager = TunnelManager(Config())
    try:
        tunnel_set = manager.list()
    except TunnelError as e:
        raise error_exit(e) from e

    if json_output:
        print(json.dumps(tunnel_set.to_dict(), indent=2))
        return
    print_tunnels(tunnel_set)


@app.command
def add(addresses: Addresses, ports: Ports, *, mode: Mode = "tcp"):
    """Add a tunnel forwarding each port to every backend IP.

    Example:
        haproxy-tunnels tunnel add 10.0.0.1,10.0.0.2 80,443
        haproxy-tunnels tunnel add 2001:db8::1 8080 --mode http
    """
    cfg = Config()
    try:
        tunnel_id = TunnelManager(cfg).add(addresses, ports, mode)
    except TunnelError as e:
        raise error_exit(e) from e
    print(f"[ok] Tunnel added (ID {tunnel_id})")
    _applied(cfg)


@app.command
def edit(
    tunnel_id: TunnelId,
    *,
    addresses: OptionalAddresses = None,
    ports: OptionalPorts = None,
    mode: OptionalMode = None,
):
    """Change a tunnel's backend IPs, ports or mode.

    Options left out keep their current value.
    """
    cfg = Config()
    try:
        tunnel = TunnelManager(cfg).edit(tunnel_id, addresses, ports, mode)
    except TunnelError as e:
        raise error_exit(e) from e
    print(f"[ok] Tunnel ID {tunnel_id} updated: {tunnel.backend_ip} {tunnel.ports_csv} {tunnel.mode.value}")
    _applied(cfg)


@app.command(name=["rm", "delete"])
def delete(tunnel_id: TunnelId, yes: Yes = False):
    """Delete a tunnel.

    Tunnels after it move down one ID.
    """
    if not yes and not confirm(f"Are you sure you want to delete tunnel ID {tunnel_id}?"):
        print("Deletion cancelled.")
        return

    cfg = Config()
    try:
        TunnelManager(cfg).delete(tunnel_id)
    except TunnelError as e:
        raise error_exit(e) from e
    print(f"[ok] Tunnel ID {tunnel_id} deleted")
    _applied(cfg)
