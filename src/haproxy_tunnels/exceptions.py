# src/haproxy_tunnels/exceptions.py
"""Errors raised by tunnel operations.

Every error derives from TunnelError so the CLI can report any failure
with a single except clause. Activation errors carry the stage that
failed and the diagnostic text from the external tool.
"""

from __future__ import annotations


class TunnelError(Exception):
    """Base error for tunnel management."""


class ValidationError(TunnelError):
    """Operator input was rejected before anything was changed."""

    def __init__(self, field: str, value: str, message: str = "") -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"Invalid {field}: {value!r}")


class OutOfRange(TunnelError):
    """Tunnel id does not resolve to an existing tunnel."""

    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        if size:
            detail = f"valid ids are 0-{size - 1}"
        else:
            detail = "no tunnels configured"
        super().__init__(f"Invalid tunnel ID: {index} ({detail})")


class PersistenceError(TunnelError):
    """State file could not be read or written."""


class ActivationError(TunnelError):
    """Rendered config could not be made live."""

    stage = "activate"

    def __init__(self, message: str, output: str = "") -> None:
        self.output = output
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.output:
            return f"{message}\n{self.output.rstrip()}"
        return message


class ValidationFailed(ActivationError):
    """haproxy -c rejected the rendered config; live config untouched."""

    stage = "validate"


class DeployFailed(ActivationError):
    """Copying the checked config over the live path failed."""

    stage = "deploy"


class RestartFailed(ActivationError):
    """Live config was written but the service did not restart."""

    stage = "restart"
