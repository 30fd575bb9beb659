# src/haproxy_tunnels/haproxy.py
"""Render a TunnelSet into a complete haproxy.cfg.

Each (tunnel, port) pair gets its own listen section rather than sharing
one frontend with ACL routing, so regenerating after an edit to one
tunnel can't change how any other port is routed.
"""

from __future__ import annotations

from .tunnels import HealthCheckPolicy, Mode, Tunnel, TunnelSet
from .validation import strip_brackets

GLOBAL_SECTION = """\
global
    log /dev/log         local0
    chroot /var/lib/haproxy
    stats socket /run/haproxy/admin.sock mode 660 level admin expose-fd listeners
    stats timeout 30s
    user haproxy
    group haproxy
    daemon
    maxconn 20000
"""

DEFAULTS_SECTION = """\
defaults
    log                  global
    option               dontlog-normal
    timeout connect 5s
    timeout client  50s
    timeout server  50s
"""

# Catch-all for traffic no listen section matches
FALLBACK_SECTION = """\
backend default_drop_backend
    mode tcp
"""

INDENT = "    "


def listener_name(ordinal: int, port: int) -> str:
    """Section name, unique per (tunnel ordinal, port)."""
    return f"listen_tunnel_{ordinal}_port_{port}"


def format_address(address: str) -> str:
    """Bracket IPv6 literals for use in address:port strings.

    Brackets typed around an IPv4 address are dropped.
    """
    address = strip_brackets(address)
    if ":" in address:
        return f"[{address}]"
    return address


def health_check_lines(mode: Mode, policy: HealthCheckPolicy) -> list[str]:
    """Health check directives for one listen section.

    With no health check port, tcp sections still get a plain connect
    check against each server's own port; http sections get nothing.
    """
    if mode is Mode.HTTP:
        if not policy.enabled:
            return []
        return ["option httpchk GET / HTTP/1.1", "http-check expect status 200"]
    if not policy.enabled:
        return ["option tcp-check"]
    return ["option tcp-check", f"tcp-check connect port {policy.port}"]


def render_listener(ordinal: int, tunnel: Tunnel, port: int, policy: HealthCheckPolicy) -> str:
    """Render the listen section forwarding one port of a tunnel."""
    lines = [
        f"bind *:{port}",
        f"mode {tunnel.mode.value}",
        "option               httplog" if tunnel.mode is Mode.HTTP else "option               tcplog",
        "option               dontlognull",
    ]
    if len(tunnel.backend_addresses) > 1:
        lines.append("balance roundrobin")
    lines.extend(health_check_lines(tunnel.mode, policy))
    # Backends listen on the same port as the frontend
    for i, address in enumerate(tunnel.backend_addresses):
        lines.append(f"server srv{i} {format_address(address)}:{port} check")

    body = "".join(f"{INDENT}{line}\n" for line in lines)
    return f"listen {listener_name(ordinal, port)}\n{body}"


def render(tunnel_set: TunnelSet) -> str:
    """Render the full haproxy.cfg for tunnel_set."""
    sections = [GLOBAL_SECTION, DEFAULTS_SECTION]
    for ordinal, tunnel in enumerate(tunnel_set):
        for port in tunnel.ports:
            sections.append(render_listener(ordinal, tunnel, port, tunnel_set.health_check))
    sections.append(FALLBACK_SECTION)
    return "\n".join(sections)
