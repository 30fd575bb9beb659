# src/haproxy_tunnels/config.py

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_FILE = "~/.haproxy_tunnels_data"
DEFAULT_HAPROXY_BIN = "haproxy"


def _default_data_file() -> Path:
    return Path(os.environ.get("HAPROXY_TUNNELS_DATA", DEFAULT_DATA_FILE)).expanduser()


@dataclass
class Config:
    """Paths and unit names used by haproxy-tunnels.

    File layout:
        ~/.haproxy_tunnels_data       - Persisted tunnels, health check port, bot settings
        /tmp/haproxy_generated.cfg    - Staging copy checked before deployment
        /etc/haproxy/haproxy.cfg      - Live HAProxy configuration
    """

    data_file: Path = field(default_factory=_default_data_file)
    haproxy_config: Path = Path("/etc/haproxy/haproxy.cfg")
    staging_config: Path = Path("/tmp/haproxy_generated.cfg")
    haproxy_bin: str = field(
        default_factory=lambda: os.environ.get("HAPROXY_BIN", DEFAULT_HAPROXY_BIN)
    )
    service: str = "haproxy"

    # journald is tuned so HAProxy alerts don't broadcast to every terminal
    journald_config: Path = Path("/etc/systemd/journald.conf")
    journald_service: str = "systemd-journald"

    @property
    def lock_file(self) -> Path:
        """Advisory lock serializing invocations that touch the state file."""
        return self.data_file.with_name(self.data_file.name + ".lock")

    def check_command(self, path: Path) -> list[str]:
        """Syntax check command for a rendered config file.

        -V prints verbose checker output, which is shown to the operator
        along with any warnings.
        """
        return [self.haproxy_bin, "-c", "-V", "-f", str(path)]
