# src/haproxy_tunnels/operations.py
"""Tunnel operations: validate, mutate, save, render, activate.

Each mutating operation runs under the state file lock and saves the new
state BEFORE activating it. If activation then fails the edit is still
on disk and `apply()` can push it once the problem is fixed.
"""

from __future__ import annotations

from collections.abc import Callable

from . import haproxy, state_file
from .activation import Activator
from .config import Config
from .exceptions import ValidationError
from .tunnels import HealthCheckPolicy, Tunnel, TunnelSet
from .validation import validate_telegram_admin_id, validate_telegram_token


class TunnelManager:
    """Entry point for the tunnel operations.

    Args:
        cfg: Paths and service names.
        activator: Makes rendered configs live (defaults to Activator(cfg)).
    """

    def __init__(self, cfg: Config | None = None, activator: Activator | None = None) -> None:
        self.cfg = cfg or Config()
        self.activator = activator or Activator(self.cfg)

    def load(self) -> TunnelSet:
        return state_file.load(self.cfg.data_file)

    def save(self, tunnel_set: TunnelSet) -> None:
        state_file.save(tunnel_set, self.cfg.data_file)

    def _mutate(self, change: Callable[[TunnelSet], object], activate: bool = True) -> object:
        """Load, apply change, save, then activate; returns change's result.

        change raises to abort before anything is written.
        """
        with state_file.locked(self.cfg.lock_file):
            tunnel_set = self.load()
            result = change(tunnel_set)
            self.save(tunnel_set)
            if activate:
                self.activator.activate(haproxy.render(tunnel_set))
        return result

    def list(self) -> TunnelSet:
        """Current state, read fresh from disk."""
        return self.load()

    def add(self, addresses: str, ports: str, mode: str = "") -> int:
        """Add a tunnel and return its id.

        Raises:
            ValidationError: If any field is malformed (nothing is saved).
        """
        tunnel = Tunnel.parse(addresses, ports, mode)
        return self._mutate(lambda ts: ts.append(tunnel))

    def edit(
        self,
        tunnel_id: int,
        addresses: str | None = None,
        ports: str | None = None,
        mode: str | None = None,
    ) -> Tunnel:
        """Replace a tunnel's fields; None keeps the stored value.

        Raises:
            OutOfRange: If tunnel_id doesn't exist.
            ValidationError: If a new value is malformed.
        """

        def change(tunnel_set: TunnelSet) -> Tunnel:
            current = tunnel_set[tunnel_id]
            new_mode = current.mode.value if mode is None or not mode.strip() else mode
            tunnel = Tunnel.parse(
                current.backend_ip if addresses is None else addresses,
                current.ports_csv if ports is None else ports,
                new_mode,
            )
            tunnel_set.replace(tunnel_id, tunnel)
            return tunnel

        return self._mutate(change)

    def delete(self, tunnel_id: int) -> Tunnel:
        """Remove a tunnel; ids after it shift down by one.

        Raises:
            OutOfRange: If tunnel_id doesn't exist.
        """
        return self._mutate(lambda ts: ts.remove(tunnel_id))

    def set_health_check_port(self, value: str) -> HealthCheckPolicy:
        """Set the global health check port, or 'none' to disable it.

        Raises:
            ValidationError: If value is neither a port nor 'none'.
        """
        policy = HealthCheckPolicy.parse(value)

        def change(tunnel_set: TunnelSet) -> HealthCheckPolicy:
            tunnel_set.health_check = policy
            return policy

        return self._mutate(change)

    def apply(self) -> str:
        """Re-render and re-activate the saved state without changing it."""
        with state_file.locked(self.cfg.lock_file):
            return self.activator.activate(haproxy.render(self.load()))

    def render(self) -> str:
        """Rendered haproxy.cfg for the saved state (no activation)."""
        return haproxy.render(self.load())

    def set_telegram(self, token: str | None = None, admin_id: str | None = None) -> None:
        """Update bot credentials; haproxy.cfg is unaffected so nothing is activated.

        Raises:
            ValidationError: If the token isn't <bot id>:<secret> or admin_id
                isn't numeric.
        """
        if token is not None and not validate_telegram_token(token):
            raise ValidationError(
                "Telegram bot token", token, "Invalid Telegram bot token: expected <bot id>:<secret>"
            )
        if admin_id is not None and not validate_telegram_admin_id(admin_id):
            raise ValidationError("Telegram admin ID", admin_id)

        def change(tunnel_set: TunnelSet) -> None:
            if token is not None:
                tunnel_set.telegram.bot_token = token
            if admin_id is not None:
                tunnel_set.telegram.admin_id = admin_id

        self._mutate(change, activate=False)
