"""
nginx-vhost CLI - create a local Nginx virtual host.

Usage:
    sudo nginx-vhost -n <vhostName>             - Provision the host
    sudo nginx-vhost -n <vhostName> --rollback  - Remove what a run created
"""

import sys
from typing import Optional

import click

from vhost import __version__
from vhost.config import ProvisionPaths, Settings
from vhost.core.pipeline import ConfirmRollback, ProvisionResult
from vhost.logging import VhostLogger, get_vhost_logger, reset_logging, setup_logging
from vhost.provisioner import VhostProvisioner

USAGE = """USAGE :
    nginx-vhost -n <vhostName>

Creates a virtual host for Nginx.

The name provided with the '-n' argument will be used to access the host through http://vhostName.
The following actions will be executed :

- create a vhost configuration file for Nginx in /etc/nginx/sites-available
- create a link from /etc/nginx/sites-enabled to this config file
- create the web root /var/www/vhostName with a test page
- add a line in /etc/hosts to point local host (127.0.0.1) to the vhostName
- stop Apache service, restart Nginx service, check site access.
"""

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _print_usage_and_exit() -> None:
    click.echo(USAGE)
    sys.exit(1)


def _rollback_prompt(reporter: VhostLogger, yes: bool, no_rollback: bool) -> ConfirmRollback:
    """Build the rollback confirmation callback from the CLI flags."""

    def confirm(paths: ProvisionPaths) -> bool:
        if yes:
            return True
        if no_rollback:
            return False

        reporter.hints(
            "Rolling back will back up and clean the hosts file and remove :",
            [paths.config_file, paths.enabled_link, paths.web_root],
        )
        try:
            return click.confirm("Roll back the changes made for this host?", default=False)
        except click.Abort:
            return False

    return confirm


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-n", "--name", "host_name", help="Host name of the virtual host")
@click.option("--yes", "-y", is_flag=True, help="Roll back without asking if a step fails")
@click.option("--no-rollback", is_flag=True, help="Never roll back, only print cleanup commands")
@click.option("--rollback", "rollback_only", is_flag=True, help="Remove the artifacts of a previous run")
@click.option("--nginx-dir", help="Nginx configuration directory (default: /etc/nginx)")
@click.option("--web-root", help="Base directory of web roots (default: /var/www)")
@click.option("--hosts-file", help="Hosts file to update (default: /etc/hosts)")
@click.option("--group", "web_group", help="Web server group (default: www-data)")
@click.option("--log-level", default="INFO", show_default=True,
              type=click.Choice(LOG_LEVELS, case_sensitive=False))
@click.version_option(__version__, prog_name="nginx-vhost")
def cli(host_name: Optional[str], yes: bool, no_rollback: bool, rollback_only: bool,
        nginx_dir: Optional[str], web_root: Optional[str], hosts_file: Optional[str],
        web_group: Optional[str], log_level: str):
    """Create a virtual host for Nginx."""
    if not host_name or host_name.startswith("-"):
        _print_usage_and_exit()

    reset_logging()
    setup_logging(level=log_level)
    reporter = get_vhost_logger(__name__)

    settings = Settings.from_env(
        nginx_dir=nginx_dir,
        web_root_base=web_root,
        hosts_file=hosts_file,
        web_group=web_group,
    )
    provisioner = VhostProvisioner(
        settings=settings,
        confirm_rollback=_rollback_prompt(reporter, yes, no_rollback),
        reporter=reporter,
    )

    with provisioner.transport:
        if rollback_only:
            _rollback(provisioner, reporter, host_name)
        else:
            _provision(provisioner, reporter, host_name)


def _rollback(provisioner: VhostProvisioner, reporter: VhostLogger, host_name: str) -> None:
    """Undo a previous run for host_name."""
    reporter.banner(f"Removing Nginx configuration for host name = {host_name}")

    outcome = provisioner.check_preconditions(host_name)
    if not outcome.succeeded:
        _report_error(reporter, outcome.error)
        sys.exit(1)

    try:
        provisioner.rollback(host_name)
    except OSError as e:
        reporter.error_box(str(e))
        _print_debug(reporter, provisioner.paths_for(host_name))
        sys.exit(1)


def _provision(provisioner: VhostProvisioner, reporter: VhostLogger, host_name: str) -> None:
    """Run the pipeline and report the result."""
    reporter.banner(f"Creating Nginx configuration for host name = {host_name}")
    paths = provisioner.paths_for(host_name)

    try:
        result = provisioner.provision(host_name)
    except OSError as e:
        # System errors before the first mutating step, or during a rollback
        reporter.failed()
        reporter.error_box(str(e))
        _print_debug(reporter, paths)
        sys.exit(1)

    if not result.success:
        _report_failure(reporter, result, paths)
        sys.exit(1)

    _print_debug(reporter, paths, cleanup=False)
    body = provisioner.last_context.response_body or ""
    reporter.console.print("°" * 40)
    reporter.console.print(body.rstrip("\n"), markup=False)
    reporter.console.print("°" * 40)
    reporter.console.print()
    reporter.success(f"Everything looks good ! ({result.duration:.2f}s)")


def _report_failure(reporter: VhostLogger, result: ProvisionResult, paths: ProvisionPaths) -> None:
    _report_error(reporter, result.error)
    if result.rollback_offered and not result.rolled_back:
        _print_debug(reporter, paths)


def _report_error(reporter: VhostLogger, error) -> None:
    reporter.error_box(error.message)
    if error.hints:
        reporter.hints("To fix it :", error.hints)


def _print_debug(reporter: VhostLogger, paths: ProvisionPaths, cleanup: bool = True) -> None:
    """Print the files a run modifies and, optionally, how to clean them up."""
    reporter.hints(
        "The following files may have been modified : enter the following commands to edit them manually :",
        paths.edit_commands(),
    )
    if cleanup:
        reporter.hints("To clean up :", paths.cleanup_commands())


def main():
    """Entry point for CLI."""
    try:
        cli.main(standalone_mode=False)
    except click.UsageError as e:
        click.echo(f"Error: {e.format_message()}", err=True)
        _print_usage_and_exit()
    except click.Abort:
        click.echo("Aborted.", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
