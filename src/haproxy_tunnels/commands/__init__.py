# src/haproxy_tunnels/commands/__init__.py
"""Command topic modules for haproxy-tunnels CLI."""

from . import init as init
from . import proxy as proxy
from . import telegram as telegram
from . import tunnel as tunnel
