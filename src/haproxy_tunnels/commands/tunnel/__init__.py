# src/haproxy_tunnels/commands/tunnel/__init__.py

"""Tunnel management commands."""

from .app import add, app, delete, edit, list_tunnels

__all__ = [
    "add",
    "app",
    "delete",
    "edit",
    "list_tunnels",
]
