"""
Integration tests for the nginx-vhost command.
"""

import functools
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

import vhost.cli.main as cli_main
from vhost import VhostProvisioner
from vhost.cli.main import cli, main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patched_provisioner(monkeypatch, transport, http_client, linux, as_root):
    """Make the CLI build provisioners on the temporary machine."""
    monkeypatch.setattr(
        cli_main,
        "VhostProvisioner",
        functools.partial(VhostProvisioner, transport=transport, http_client=http_client, platform=linux),
    )


def cli_args(settings, *extra):
    return [
        "--nginx-dir", settings.nginx_dir,
        "--web-root", settings.web_root_base,
        "--hosts-file", settings.hosts_file,
        "--group", settings.web_group,
        *extra,
    ]


def cli_env(settings):
    return {
        "NGINX_VHOST_OWNER": settings.owner,
        "NGINX_VHOST_BACKUP_DIR": settings.hosts_backup_dir,
    }


class TestUsage:
    """Missing or invalid -n."""

    def test_no_arguments(self, runner):
        result = runner.invoke(cli, [])

        assert result.exit_code == 1
        assert "USAGE" in result.output

    def test_empty_name(self, runner):
        result = runner.invoke(cli, ["-n", ""])

        assert result.exit_code == 1
        assert "USAGE" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "nginx-vhost" in result.output

    def test_main_turns_usage_errors_into_exit_1(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.argv", ["nginx-vhost", "-n"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "USAGE" in capsys.readouterr().out


class TestProvisionCommand:
    """End to end through the CLI."""

    def test_success(self, runner, settings, patched_provisioner):
        result = runner.invoke(cli, cli_args(settings, "-n", "test.local"), env=cli_env(settings))

        assert result.exit_code == 0, result.output
        assert "Everything looks good" in result.output
        assert os.path.islink(Path(settings.sites_enabled) / "test.local.conf")
        assert Path(settings.hosts_file).read_text() == "127.0.0.1\t\ttest.local\n"

    def test_transport_closed(self, runner, settings, transport, patched_provisioner):
        runner.invoke(cli, cli_args(settings, "-n", "test.local"), env=cli_env(settings))

        assert transport.closed == 1

    def test_second_run_declined_rollback(self, runner, settings, patched_provisioner):
        runner.invoke(cli, cli_args(settings, "-n", "test.local"), env=cli_env(settings))

        result = runner.invoke(
            cli, cli_args(settings, "-n", "test.local", "--no-rollback"), env=cli_env(settings)
        )

        assert result.exit_code == 1
        assert "ERROR" in result.output
        assert "To clean up" in result.output
        assert (Path(settings.web_root_base) / "test.local").is_dir()

    def test_not_root(self, runner, settings, patched_provisioner, monkeypatch):
        monkeypatch.setattr("vhost.steps.os.geteuid", lambda: 1000)

        result = runner.invoke(cli, cli_args(settings, "-n", "test.local"), env=cli_env(settings))

        assert result.exit_code == 1
        assert "root privileges" in result.output
        assert not (Path(settings.sites_available) / "test.local.conf").exists()

    def test_rollback_flag(self, runner, settings, patched_provisioner):
        runner.invoke(cli, cli_args(settings, "-n", "test.local"), env=cli_env(settings))

        result = runner.invoke(
            cli, cli_args(settings, "-n", "test.local", "--rollback"), env=cli_env(settings)
        )

        assert result.exit_code == 0, result.output
        assert not (Path(settings.sites_available) / "test.local.conf").exists()
        assert not (Path(settings.web_root_base) / "test.local").exists()
        assert Path(settings.hosts_file).read_text() == ""
