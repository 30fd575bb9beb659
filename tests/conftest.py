# tests/conftest.py
"""Shared fixtures: a Config rooted in tmp_path."""

import pytest


@pytest.fixture
def cfg(tmp_path):
    """Config with every path under tmp_path."""
    from haproxy_tunnels.config import Config

    live_dir = tmp_path / "etc" / "haproxy"
    live_dir.mkdir(parents=True)
    return Config(
        data_file=tmp_path / "home" / ".haproxy_tunnels_data",
        haproxy_config=live_dir / "haproxy.cfg",
        staging_config=tmp_path / "tmp" / "haproxy_generated.cfg",
        haproxy_bin="haproxy",
        journald_config=tmp_path / "journald.conf",
    )


@pytest.fixture
def state_env(tmp_path, monkeypatch):
    """Point Config() at a state file under tmp_path via HAPROXY_TUNNELS_DATA."""
    path = tmp_path / "state"
    monkeypatch.setenv("HAPROXY_TUNNELS_DATA", str(path))
    return path
