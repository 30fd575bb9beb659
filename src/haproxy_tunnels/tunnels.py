# src/haproxy_tunnels/tunnels.py
"""Tunnel records and the tunnel set they live in.

A tunnel forwards each of its ports to every backend address on the same
port number. Tunnel ids are positions in the TunnelSet, so deleting a
tunnel shifts the ids of every tunnel after it.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from .exceptions import OutOfRange, ValidationError
from .validation import (
    HEALTH_CHECK_DISABLED,
    split_csv,
    validate_addresses,
    validate_health_check_port,
    validate_mode,
    validate_ports,
)


class Mode(str, Enum):
    """HAProxy proxy mode for a tunnel."""

    TCP = "tcp"
    HTTP = "http"

    @classmethod
    def parse(cls, value: str | None) -> Mode:
        """Parse operator input; blank means tcp."""
        if value is None or not value.strip():
            return cls.TCP
        if not validate_mode(value):
            raise ValidationError("mode", value, f"Invalid mode: {value!r}. Must be 'tcp' or 'http'.")
        return cls(value.strip().lower())


@dataclass(frozen=True)
class Tunnel:
    """One forwarding rule."""

    backend_addresses: tuple[str, ...]
    ports: tuple[int, ...]
    mode: Mode = Mode.TCP

    @classmethod
    def parse(cls, addresses: str, ports: str, mode: str | None = None) -> Tunnel:
        """Build a tunnel from comma-separated operator input.

        Raises:
            ValidationError: If any field is malformed.
        """
        if not validate_addresses(addresses):
            raise ValidationError("backend IP(s)", addresses)
        if not validate_ports(ports):
            raise ValidationError(
                "port(s)", ports, f"Invalid port(s): {ports!r}. Ports must be between 1 and 65535."
            )
        return cls(
            backend_addresses=tuple(split_csv(addresses)),
            # dict.fromkeys drops repeated ports but keeps first-seen order
            ports=tuple(dict.fromkeys(int(p) for p in split_csv(ports))),
            mode=Mode.parse(mode),
        )

    @property
    def backend_ip(self) -> str:
        """Addresses as the comma-separated string operators type."""
        return ",".join(self.backend_addresses)

    @property
    def ports_csv(self) -> str:
        return ",".join(str(p) for p in self.ports)

    def to_record(self) -> dict[str, str]:
        """Serializable form stored between TUNNEL_START/TUNNEL_END."""
        return {"backend_ip": self.backend_ip, "ports": self.ports_csv, "mode": self.mode.value}

    @classmethod
    def from_record(cls, record: dict) -> Tunnel:
        return cls.parse(
            str(record.get("backend_ip", "")),
            str(record.get("ports", "")),
            record.get("mode") or None,
        )


@dataclass(frozen=True)
class HealthCheckPolicy:
    """Global backend health check setting. port=None disables it."""

    port: int | None = None

    @property
    def enabled(self) -> bool:
        return self.port is not None

    @classmethod
    def parse(cls, value: str) -> HealthCheckPolicy:
        """Parse 'none' or a port number.

        Raises:
            ValidationError: If value is neither.
        """
        if not validate_health_check_port(value):
            raise ValidationError(
                "health check port",
                value,
                f"Invalid port: {value!r}. Must be a number between 1 and 65535 or 'none'.",
            )
        if value == HEALTH_CHECK_DISABLED:
            return cls()
        return cls(port=int(value))

    def __str__(self) -> str:
        return str(self.port) if self.enabled else HEALTH_CHECK_DISABLED


@dataclass
class TelegramSettings:
    """Remote control bot credentials kept alongside the tunnels."""

    bot_token: str = ""
    admin_id: str = ""


@dataclass
class TunnelSet:
    """Ordered tunnels plus the global settings persisted with them."""

    tunnels: list[Tunnel] = field(default_factory=list)
    health_check: HealthCheckPolicy = field(default_factory=HealthCheckPolicy)
    telegram: TelegramSettings = field(default_factory=TelegramSettings)

    def __len__(self) -> int:
        return len(self.tunnels)

    def __iter__(self) -> Iterator[Tunnel]:
        return iter(self.tunnels)

    def __getitem__(self, index: int) -> Tunnel:
        self._check_index(index)
        return self.tunnels[index]

    def _check_index(self, index: int) -> None:
        # Negative ids are rejected rather than counted from the end
        if not 0 <= index < len(self.tunnels):
            raise OutOfRange(index, len(self.tunnels))

    def append(self, tunnel: Tunnel) -> int:
        """Add a tunnel at the end and return its id."""
        self.tunnels.append(tunnel)
        return len(self.tunnels) - 1

    def replace(self, index: int, tunnel: Tunnel) -> None:
        self._check_index(index)
        self.tunnels[index] = tunnel

    def remove(self, index: int) -> Tunnel:
        """Remove a tunnel; later tunnels move down one id."""
        self._check_index(index)
        return self.tunnels.pop(index)

    def to_dict(self) -> dict:
        """Machine-readable listing: ids, tunnel fields and health check port."""
        return {
            "tunnels": [
                {"id": i, **tunnel.to_record()} for i, tunnel in enumerate(self.tunnels)
            ],
            "health_check_port": str(self.health_check.port or ""),
        }
