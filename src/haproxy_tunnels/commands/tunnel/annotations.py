# src/haproxy_tunnels/commands/tunnel/annotations.py
"""Type annotations for tunnel commands."""

from typing import Annotated

import cyclopts

TunnelId = Annotated[
    int,
    cyclopts.Parameter(help="Tunnel ID as shown by 'tunnel ls'"),
]

Addresses = Annotated[
    str,
    cyclopts.Parameter(help="Backend IP(s), comma-separated (e.g. 192.168.1.10,2001:db8::1)"),
]

Ports = Annotated[
    str,
    cyclopts.Parameter(help="Ports to forward, comma-separated (e.g. 80,443)"),
]

Mode = Annotated[
    str,
    cyclopts.Parameter(name=["--mode", "-m"], help="Proxy mode: tcp or http"),
]

OptionalAddresses = Annotated[
    str | None,
    cyclopts.Parameter(
        name=["--addresses", "-a"],
        help="New backend IP(s) (keeps current if omitted)",
    ),
]

OptionalPorts = Annotated[
    str | None,
    cyclopts.Parameter(name=["--ports", "-p"], help="New ports (keeps current if omitted)"),
]

OptionalMode = Annotated[
    str | None,
    cyclopts.Parameter(name=["--mode", "-m"], help="New mode: tcp or http (keeps current if omitted)"),
]
