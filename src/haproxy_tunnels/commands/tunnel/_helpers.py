# src/haproxy_tunnels/commands/tunnel/_helpers.py
"""Internal helper functions for tunnel commands."""

from haproxy_tunnels.tunnels import TunnelSet


def print_tunnels(tunnel_set: TunnelSet) -> None:
    """Print tunnels with their ids and the health check port."""
    print("Tunnels:")
    print("-" * 40)
    if not len(tunnel_set):
        print("  No tunnels configured yet.")
    for i, tunnel in enumerate(tunnel_set):
        print(f"ID: {i}")
        print(f"  Backend IP(s): {tunnel.backend_ip}")
        print(f"  Ports:         {tunnel.ports_csv}")
        print(f"  Mode:          {tunnel.mode.value}")
    print("-" * 40)
    print(f"Default Health Check Port: {tunnel_set.health_check.port or 'None'}")


def confirm(prompt: str) -> bool:
    """Ask a y/N question on stdin."""
    try:
        answer = input(f"{prompt} (y/N): ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")
