# tests/commands/proxy/test_app.py
"""Tests for proxy app commands."""

import pytest


class TestApplyCommand:
    """Test apply command."""

    def test_apply_prints_checker_output(self, mocker, capsys):
        """Should print checker warnings and the applied line."""
        from haproxy_tunnels.commands.proxy.app import apply

        mock_manager = mocker.patch("haproxy_tunnels.commands.proxy.app.TunnelManager")
        mock_manager.return_value.apply.return_value = "[WARNING] something minor"

        apply()

        out = capsys.readouterr().out
        assert "[WARNING] something minor" in out
        assert "[ok] HAProxy configuration applied" in out

    def test_apply_error_exits(self, mocker):
        """Should exit with [error] on activation failure."""
        from haproxy_tunnels.commands.proxy.app import apply
        from haproxy_tunnels.exceptions import DeployFailed

        mock_manager = mocker.patch("haproxy_tunnels.commands.proxy.app.TunnelManager")
        mock_manager.return_value.apply.side_effect = DeployFailed("Failed to copy HAProxy configuration")

        with pytest.raises(SystemExit) as exc_info:
            apply()

        assert "[error] Failed to copy" in str(exc_info.value.code)


class TestHealthCheckCommand:
    """Test health_check command."""

    def test_set_port(self, mocker, capsys):
        """Should report the new port."""
        from haproxy_tunnels.commands.proxy.app import health_check
        from haproxy_tunnels.tunnels import HealthCheckPolicy

        mock_manager = mocker.patch("haproxy_tunnels.commands.proxy.app.TunnelManager")
        mock_manager.return_value.set_health_check_port.return_value = HealthCheckPolicy(port=8080)

        health_check("8080")

        mock_manager.return_value.set_health_check_port.assert_called_once_with("8080")
        assert "[ok] Default health check port set to: 8080" in capsys.readouterr().out

    def test_disable(self, mocker, capsys):
        """Should report None when disabled."""
        from haproxy_tunnels.commands.proxy.app import health_check
        from haproxy_tunnels.tunnels import HealthCheckPolicy

        mock_manager = mocker.patch("haproxy_tunnels.commands.proxy.app.TunnelManager")
        mock_manager.return_value.set_health_check_port.return_value = HealthCheckPolicy()

        health_check("none")

        assert "set to: None" in capsys.readouterr().out

    def test_invalid_port_exits(self, mocker):
        """Should exit with the validation message."""
        from haproxy_tunnels.commands.proxy.app import health_check
        from haproxy_tunnels.exceptions import ValidationError

        mock_manager = mocker.patch("haproxy_tunnels.commands.proxy.app.TunnelManager")
        mock_manager.return_value.set_health_check_port.side_effect = ValidationError(
            "health check port", "80,443"
        )

        with pytest.raises(SystemExit) as exc_info:
            health_check("80,443")

        assert "[error]" in str(exc_info.value.code)


class TestRenderCommand:
    """Test render command."""

    def test_render_prints_document(self, state_env, capsys):
        """Should print the generated config for the saved state."""
        from haproxy_tunnels import state_file
        from haproxy_tunnels.commands.proxy.app import render
        from haproxy_tunnels.tunnels import Tunnel, TunnelSet

        ts = TunnelSet()
        ts.append(Tunnel.parse("10.0.0.1", "80"))
        state_file.save(ts, state_env)

        render()

        out = capsys.readouterr().out
        assert "listen listen_tunnel_0_port_80" in out
        assert "backend default_drop_backend" in out

    def test_render_check_validates(self, mocker, capsys):
        """Should run the checker on the rendered document."""
        from haproxy_tunnels.commands.proxy.app import render

        mock_manager = mocker.patch("haproxy_tunnels.commands.proxy.app.TunnelManager")
        mock_manager.return_value.render.return_value = "global\n"
        mock_manager.return_value.activator.check.return_value = ""

        render(check=True)

        mock_manager.return_value.activator.check.assert_called_once_with("global\n")
        assert "passed validation" in capsys.readouterr().out

    def test_render_check_failure_exits(self, mocker):
        """Should exit with checker output on rejection."""
        from haproxy_tunnels.commands.proxy.app import render
        from haproxy_tunnels.exceptions import ValidationFailed

        mock_manager = mocker.patch("haproxy_tunnels.commands.proxy.app.TunnelManager")
        mock_manager.return_value.render.return_value = "global\n"
        mock_manager.return_value.activator.check.side_effect = ValidationFailed(
            "HAProxy configuration validation failed:", "[ALERT] bad"
        )

        with pytest.raises(SystemExit) as exc_info:
            render(check=True)

        assert "[ALERT] bad" in str(exc_info.value.code)


class TestStatusCommand:
    """Test status command."""

    def test_short_active(self, mocker, capsys):
        """Should print active."""
        from haproxy_tunnels.commands.proxy.app import status

        mocker.patch("subprocess.run", return_value=mocker.Mock(returncode=0))

        status(short=True)

        assert capsys.readouterr().out.strip() == "active"

    def test_short_inactive(self, mocker, capsys):
        """Should print inactive."""
        from haproxy_tunnels.commands.proxy.app import status

        mocker.patch("subprocess.run", return_value=mocker.Mock(returncode=3))

        status(short=True)

        assert capsys.readouterr().out.strip() == "inactive"

    def test_full_status(self, mocker):
        """Should call systemctl status with the line count."""
        from haproxy_tunnels.commands.proxy.app import status

        mock_run = mocker.patch("subprocess.run", return_value=mocker.Mock(returncode=0))

        status(lines=10)

        assert mock_run.call_args[0][0] == [
            "sudo", "systemctl", "--no-pager", "-n10", "status", "haproxy",
        ]
