# src/haproxy_tunnels/__init__.py

"""Manage HAProxy port-forwarding tunnels."""

__version__ = "0.1.0"
