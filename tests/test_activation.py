# tests/test_activation.py
"""Tests for activation module - stage, validate, deploy, restart."""

import subprocess

import pytest

DOCUMENT = "global\n    daemon\n"
OLD_CONFIG = "# previous live config\n"


def _fake_run(mocker, check_rc=0, check_output="Configuration file is valid", restart_error=None):
    """Patch subprocess.run: haproxy -c returns check_rc, systemctl restart may raise."""

    def run(cmd, **kwargs):
        if cmd[0] == "haproxy":
            return mocker.Mock(returncode=check_rc, stdout="", stderr=check_output)
        if "restart" in cmd and restart_error is not None:
            raise restart_error
        return mocker.Mock(returncode=0, stdout="", stderr="")

    return mocker.patch("subprocess.run", side_effect=run)


class TestActivate:
    """Test the full activate pipeline."""

    def test_success_writes_live_and_restarts(self, cfg, mocker):
        """Should validate staging, replace live config and restart haproxy."""
        from haproxy_tunnels.activation import Activator

        cfg.haproxy_config.write_text(OLD_CONFIG)
        mock_run = _fake_run(mocker)

        output = Activator(cfg).activate(DOCUMENT)

        assert cfg.haproxy_config.read_text() == DOCUMENT
        assert cfg.staging_config.read_text() == DOCUMENT
        assert output == "Configuration file is valid"
        commands = [call.args[0] for call in mock_run.call_args_list]
        assert commands == [
            ["haproxy", "-c", "-V", "-f", str(cfg.staging_config)],
            ["sudo", "systemctl", "restart", "haproxy"],
        ]

    def test_live_config_is_world_readable(self, cfg, mocker):
        """Should leave the live config 0644."""
        from haproxy_tunnels.activation import Activator

        _fake_run(mocker)

        Activator(cfg).activate(DOCUMENT)

        assert cfg.haproxy_config.stat().st_mode & 0o777 == 0o644

    def test_no_temp_files_left_beside_live_config(self, cfg, mocker):
        """Should rename the temp copy into place."""
        from haproxy_tunnels.activation import Activator

        _fake_run(mocker)

        Activator(cfg).activate(DOCUMENT)

        assert list(cfg.haproxy_config.parent.iterdir()) == [cfg.haproxy_config]

    def test_validation_failure_leaves_live_untouched(self, cfg, mocker):
        """Should raise ValidationFailed and not copy or restart."""
        from haproxy_tunnels.activation import Activator
        from haproxy_tunnels.exceptions import ValidationFailed

        cfg.haproxy_config.write_text(OLD_CONFIG)
        mock_run = _fake_run(mocker, check_rc=1, check_output="[ALERT] parsing [x:3] : unknown keyword")

        with pytest.raises(ValidationFailed) as exc_info:
            Activator(cfg).activate(DOCUMENT)

        assert cfg.haproxy_config.read_text() == OLD_CONFIG
        assert "unknown keyword" in str(exc_info.value)
        assert exc_info.value.stage == "validate"
        assert mock_run.call_count == 1

    def test_checker_not_installed(self, cfg, mocker):
        """Should raise ValidationFailed when haproxy is missing."""
        from haproxy_tunnels.activation import Activator
        from haproxy_tunnels.exceptions import ValidationFailed

        mocker.patch("subprocess.run", side_effect=FileNotFoundError("haproxy"))

        with pytest.raises(ValidationFailed) as exc_info:
            Activator(cfg).activate(DOCUMENT)

        assert "haproxy not found in PATH" in str(exc_info.value)

    def test_deploy_failure(self, cfg, mocker, tmp_path):
        """Should raise DeployFailed and skip the restart."""
        from haproxy_tunnels.activation import Activator
        from haproxy_tunnels.exceptions import DeployFailed

        cfg.haproxy_config = tmp_path / "missing-dir" / "haproxy.cfg"
        mock_run = _fake_run(mocker)

        with pytest.raises(DeployFailed) as exc_info:
            Activator(cfg).activate(DOCUMENT)

        assert "Failed to copy HAProxy configuration" in str(exc_info.value)
        assert exc_info.value.stage == "deploy"
        assert mock_run.call_count == 1

    def test_restart_failure_keeps_new_live_config(self, cfg, mocker):
        """Should raise RestartFailed after the live file was replaced (no rollback)."""
        from haproxy_tunnels.activation import Activator
        from haproxy_tunnels.exceptions import RestartFailed

        cfg.haproxy_config.write_text(OLD_CONFIG)
        error = subprocess.CalledProcessError(1, ["systemctl"], stderr="Job for haproxy.service failed")
        _fake_run(mocker, restart_error=error)

        with pytest.raises(RestartFailed) as exc_info:
            Activator(cfg).activate(DOCUMENT)

        assert cfg.haproxy_config.read_text() == DOCUMENT
        assert "Job for haproxy.service failed" in str(exc_info.value)
        assert "journalctl -u haproxy" in str(exc_info.value)
        assert exc_info.value.stage == "restart"

    def test_restart_systemctl_missing(self, cfg, mocker):
        """Should raise RestartFailed when sudo/systemctl is unavailable."""
        from haproxy_tunnels.activation import Activator
        from haproxy_tunnels.exceptions import RestartFailed

        _fake_run(mocker, restart_error=FileNotFoundError("sudo"))

        with pytest.raises(RestartFailed):
            Activator(cfg).activate(DOCUMENT)


class TestStage:
    """Test stage and check."""

    def test_stage_failure_raises_deploy_failed(self, cfg, tmp_path):
        """Should raise DeployFailed when staging can't be written."""
        from haproxy_tunnels.activation import Activator
        from haproxy_tunnels.exceptions import DeployFailed

        blocker = tmp_path / "blocker"
        blocker.write_text("")
        cfg.staging_config = blocker / "staging.cfg"

        with pytest.raises(DeployFailed):
            Activator(cfg).stage(DOCUMENT)

    def test_check_does_not_deploy(self, cfg, mocker):
        """Should validate only, leaving the live config alone."""
        from haproxy_tunnels.activation import Activator

        cfg.haproxy_config.write_text(OLD_CONFIG)
        mock_run = _fake_run(mocker)

        Activator(cfg).check(DOCUMENT)

        assert cfg.haproxy_config.read_text() == OLD_CONFIG
        assert mock_run.call_count == 1

    def test_custom_haproxy_binary(self, cfg, mocker):
        """Should run the configured haproxy binary."""
        from haproxy_tunnels.activation import Activator

        cfg.haproxy_bin = "/usr/local/sbin/haproxy"
        mock_result = mocker.Mock(returncode=0, stdout="", stderr="")
        mock_run = mocker.patch("subprocess.run", return_value=mock_result)

        Activator(cfg).check(DOCUMENT)

        assert mock_run.call_args[0][0][0] == "/usr/local/sbin/haproxy"
