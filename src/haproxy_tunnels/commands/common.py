# src/haproxy_tunnels/commands/common.py
"""Shared CLI annotations and error reporting.

All common flags use long+short forms for consistency:
  --quiet, -q
  --yes, -y
  --json, -j
"""

from typing import Annotated

import cyclopts

from haproxy_tunnels.exceptions import DeployFailed, RestartFailed, TunnelError

# Output control
Quiet = Annotated[
    bool,
    cyclopts.Parameter(
        name=["--quiet", "-q"],
        help="Suppress output",
    ),
]


# Confirmation
Yes = Annotated[
    bool,
    cyclopts.Parameter(
        name=["--yes", "-y"],
        help="Skip confirmation prompts",
    ),
]


# JSON output
JsonOutput = Annotated[
    bool,
    cyclopts.Parameter(
        name=["--json", "-j"],
        help="Output as JSON",
    ),
]


def error_exit(e: TunnelError) -> SystemExit:
    """SystemExit carrying an [error] line for e.

    The state file is saved before activation, so deploy and restart
    failures point the operator at `proxy apply` to retry.
    """
    message = f"[error] {e}"
    if isinstance(e, (DeployFailed, RestartFailed)):
        message += "\nChanges are saved; fix the problem and run 'haproxy-tunnels proxy apply'."
    return SystemExit(message)
