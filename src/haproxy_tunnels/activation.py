# src/haproxy_tunnels/activation.py
"""Make a rendered haproxy.cfg live.

Activation runs in four steps, stopping at the first failure:

    1. write the document to the staging path
    2. haproxy -c against the staging file
    3. copy staging over the live config
    4. systemctl restart haproxy

The live config is only touched after the checker accepts the staging
file. If the restart fails the live file is NOT rolled back; the running
process keeps its old config until the operator fixes the problem and
runs `proxy apply` again.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from . import systemd
from .config import Config
from .exceptions import DeployFailed, RestartFailed, ValidationFailed


class Activator:
    """Validate-then-commit pipeline for one HAProxy service."""

    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg

    def stage(self, document: str) -> Path:
        """Write document to the staging path.

        Raises:
            DeployFailed: If the staging file can't be written.
        """
        staging = self.cfg.staging_config
        try:
            staging.parent.mkdir(parents=True, exist_ok=True)
            staging.write_text(document)
        except OSError as e:
            raise DeployFailed(f"Failed to write staging config {staging}: {e}") from e
        return staging

    def validate(self, path: Path) -> str:
        """Run the HAProxy syntax checker against path.

        Returns:
            Checker output (warnings are reported even on success).

        Raises:
            ValidationFailed: If the checker rejects the file or isn't installed.
        """
        try:
            result = subprocess.run(
                self.cfg.check_command(path),
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise ValidationFailed(f"{self.cfg.haproxy_bin} not found in PATH") from e
        output = (result.stdout + result.stderr).strip()
        if result.returncode != 0:
            raise ValidationFailed("HAProxy configuration validation failed:", output)
        return output

    def deploy(self, staging: Path) -> None:
        """Replace the live config with the staging file.

        The copy lands in a temp file beside the live config first and is
        renamed over it, so the live file is either old or new, never half
        written.

        Raises:
            DeployFailed: If the copy or rename fails.
        """
        live = self.cfg.haproxy_config
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(
                dir=live.parent, prefix=f".{live.name}.", delete=False
            ) as f:
                temp_path = f.name
            shutil.copyfile(staging, temp_path)
            os.chmod(temp_path, 0o644)
            os.replace(temp_path, live)
        except OSError as e:
            if temp_path:
                Path(temp_path).unlink(missing_ok=True)
            raise DeployFailed(
                f"Failed to copy HAProxy configuration to {live}. Do you have root permissions? ({e})"
            ) from e

    def restart(self) -> None:
        """Restart the HAProxy service.

        Raises:
            RestartFailed: If systemctl fails.
        """
        unit = self.cfg.service
        try:
            systemd.restart(unit)
        except subprocess.CalledProcessError as e:
            raise RestartFailed(
                f"Failed to restart {unit}. Check 'sudo journalctl -u {unit} -f' for details.",
                e.stderr or "",
            ) from e
        except FileNotFoundError as e:
            raise RestartFailed(f"Failed to restart {unit}: {e}") from e

    def check(self, document: str) -> str:
        """Stage and validate without touching the live config."""
        return self.validate(self.stage(document))

    def activate(self, document: str) -> str:
        """Run the full pipeline; returns checker output on success."""
        staging = self.stage(document)
        output = self.validate(staging)
        self.deploy(staging)
        self.restart()
        return output
