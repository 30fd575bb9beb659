# src/haproxy_tunnels/systemd.py

import subprocess


def restart(unit: str) -> None:
    """Restart a unit.

    Raises:
        subprocess.CalledProcessError: If systemctl exits non-zero. stderr
            is captured on the exception for diagnostics.
    """
    subprocess.run(
        ["sudo", "systemctl", "restart", unit],
        capture_output=True,
        text=True,
        check=True,
    )


def status(unit: str, lines: int = 25) -> int:
    """Print systemctl status for a unit and return its exit code."""
    result = subprocess.run(
        ["sudo", "systemctl", "--no-pager", f"-n{lines}", "status", unit],
        check=False,  # status returns non-zero if not running
    )
    return result.returncode


def is_active(unit: str) -> bool:
    """Check if a systemd unit is active."""
    result = subprocess.run(
        ["systemctl", "is-active", unit],
        capture_output=True,
        text=True,
        check=False,
    )
    return result.returncode == 0
