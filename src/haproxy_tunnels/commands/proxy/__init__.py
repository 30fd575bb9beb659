# src/haproxy_tunnels/commands/proxy/__init__.py

"""HAProxy configuration and service commands."""

from .app import app, apply, health_check, render, status

__all__ = [
    "app",
    "apply",
    "health_check",
    "render",
    "status",
]
