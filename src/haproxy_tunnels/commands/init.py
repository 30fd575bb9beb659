# src/haproxy_tunnels/commands/init.py
"""Init command for idempotent setup of haproxy-tunnels.

Checks that HAProxy is installed, creates an empty state file and stops
journald from broadcasting HAProxy alerts to every terminal. Safe to run
on new installs and existing systems.
"""

import shutil
import subprocess
from typing import Annotated

import cyclopts

from haproxy_tunnels import journald, state_file
from haproxy_tunnels.config import Config
from haproxy_tunnels.exceptions import PersistenceError
from haproxy_tunnels.tunnels import TunnelSet

from .common import Quiet

app = cyclopts.App(
    name="init",
    help="Check HAProxy, create the state file and quiet journald.",
)


def _check_haproxy(cfg: Config) -> bool:
    """Report whether the haproxy binary is on PATH. Installing it is up to the operator."""
    found = shutil.which(cfg.haproxy_bin)
    if found:
        print(f"  [ok] {found}")
        return True
    print(f"  [missing] {cfg.haproxy_bin} - install the haproxy package (e.g. apt install haproxy)")
    return False


def _create_state_file(cfg: Config, quiet: bool = False) -> bool | None:
    """Create an empty state file if none exists.

    Returns:
        True if created, False if existed, None if it couldn't be written.
    """
    if cfg.data_file.exists():
        if not quiet:
            print(f"  [ok] {cfg.data_file}")
        return False

    try:
        state_file.save(TunnelSet(), cfg.data_file)
    except PersistenceError as e:
        print(f"  [denied] {e}")
        return None

    if not quiet:
        print(f"  [created] {cfg.data_file}")
    return True


def _configure_journald(cfg: Config, quiet: bool = False) -> bool:
    try:
        changes = journald.configure(cfg.journald_config, service=cfg.journald_service)
    except FileNotFoundError as e:
        print(f"  [skip] {e}")
        return True
    except PermissionError:
        print(f"  [denied] {cfg.journald_config} - permission denied (run with sudo?)")
        return False
    except subprocess.CalledProcessError:
        print(f"  [error] Failed to restart {cfg.journald_service}")
        print(f"          Restart it manually: sudo systemctl restart {cfg.journald_service}")
        return False

    if not quiet:
        for change in changes:
            print(f"  [ok] {change}")
        print(f"  [ok] {cfg.journald_service} restarted")
    return True


@app.default
def init(
    quiet: Quiet = False,
    check: Annotated[
        bool,
        cyclopts.Parameter(help="Check status only, don't create or change anything"),
    ] = False,
    skip_journald: Annotated[
        bool,
        cyclopts.Parameter(help="Leave journald.conf untouched"),
    ] = False,
):
    """Prepare the host for haproxy-tunnels.

    Verifies the haproxy binary, creates the tunnel state file and sets
    ForwardToWall=no / MaxLevelWall=emerg in journald.conf (backed up to
    journald.conf.bak) so "no server available" alerts stay in the journal.

    This command is idempotent - safe to run multiple times.
    """
    cfg = Config()
    all_ok = True

    if check:
        print("Checking haproxy-tunnels setup...")
    elif not quiet:
        print("Initializing haproxy-tunnels...")

    # 1. HAProxy binary
    if not quiet or check:
        print("\nHAProxy:")
    if not _check_haproxy(cfg):
        all_ok = False

    # 2. State file
    if not quiet or check:
        print("\nTunnel state file:")
    if check:
        if cfg.data_file.exists():
            print(f"  [ok] {cfg.data_file}")
        else:
            print(f"  [missing] {cfg.data_file}")
            all_ok = False
    elif _create_state_file(cfg, quiet=quiet) is None:
        all_ok = False

    # 3. journald
    if not check and not skip_journald:
        if not quiet:
            print("\nJournald:")
        if not _configure_journald(cfg, quiet=quiet):
            all_ok = False

    # Summary
    if check:
        print()
        if all_ok:
            print("Status: All components present")
        else:
            print("Status: Missing components (run 'haproxy-tunnels init' to create)")
        return 0 if all_ok else 1

    if not quiet:
        if all_ok:
            print("\nInitialization complete.")
        else:
            print("\nInitialization incomplete - some operations failed.")
            print("Try running with elevated privileges: sudo haproxy-tunnels init")
        print("\nNext steps:")
        print("  1. Run 'haproxy-tunnels tunnel add <ips> <ports>' to add a tunnel")
        print("  2. Run 'haproxy-tunnels proxy status' to check HAProxy")

    return 0 if all_ok else 1
