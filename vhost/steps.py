"""
Provisioning steps, in the order they run.

1. ValidatePreconditions - root privileges, web group membership
2. DetectDependencies    - platform, PHP and Nginx versions
3. WriteConfig           - server block in sites-available
4. EnableSite            - symlink in sites-enabled
5. ProvisionWebRoot      - document root, test page, ownership, modes
6. RegisterHostsEntry    - hosts file backup and 127.0.0.1 mapping
7. ReloadWebServer       - stop the legacy server, reload Nginx
8. VerifyReachability    - GET the host and check its test page
"""

from contextlib import contextmanager
import grp
import os
import pwd

import httpx

from vhost.core.step import Platform, ProvisionContext, Step
from vhost.errors import (
    DependencyError,
    PermissionDeniedError,
    ServiceReloadError,
    VerificationError,
)
from vhost.logging import get_logger
from vhost.resources.hosts import HostsFileStore
from vhost.resources.probe import Prober
from vhost.resources.runtime import detect_nginx_version, detect_php_version
from vhost.resources.service import ServiceManager
from vhost.resources.sites import SiteRegistry
from vhost.resources.webroot import DIR_MODE, FILE_MODE, WebRoot

logger = get_logger(__name__)


@contextmanager
def tracking(ctx: ProvisionContext, *paths: str):
    """Record in ctx.created each of paths that appears while the block runs."""
    existed = {path: ctx.transport.file_exists(path) for path in paths}
    try:
        yield
    finally:
        for path in paths:
            if not existed[path] and ctx.transport.file_exists(path):
                ctx.created.append(path)


def is_group_member(user: str, group: str) -> bool:
    """True if user is in group, as a supplementary or primary member."""
    try:
        entry = grp.getgrnam(group)
    except KeyError:
        return False

    if user in entry.gr_mem:
        return True

    try:
        return pwd.getpwnam(user).pw_gid == entry.gr_gid
    except KeyError:
        return False


class ValidatePreconditions(Step):
    name = "validate-preconditions"

    def label(self, ctx: ProvisionContext) -> str:
        return f"Checking root privileges and membership of {ctx.settings.web_group}"

    def apply(self, ctx: ProvisionContext) -> str:
        if os.geteuid() != 0:
            raise PermissionDeniedError(
                "This script must have root privileges.",
                hints=[f"sudo nginx-vhost -n {ctx.host_name}"],
            )

        user = ctx.settings.owner
        group = ctx.settings.web_group
        if not is_group_member(user, group):
            raise PermissionDeniedError(
                f"You must belong to {group} group.",
                hints=[
                    f"sudo usermod -a -G {group} {user}",
                    "Then log out and log back in so changes are applied.",
                    f"id -nG {user} | grep -w {group}",
                ],
            )
        return "yes"


class DetectDependencies(Step):
    """Detects the platform and the PHP and Nginx runtimes."""

    name = "detect-dependencies"

    def label(self, ctx: ProvisionContext) -> str:
        return "Checking PHP and Nginx are installed"

    def apply(self, ctx: ProvisionContext) -> str:
        if ctx.platform is None:
            ctx.platform = Platform.detect()
        logger.debug("platform: %s", ctx.platform)

        ctx.php_version = detect_php_version(ctx.transport)
        ctx.nginx_version = detect_nginx_version(ctx.transport)

        if not ctx.nginx_version:
            raise DependencyError(
                "Nginx is not installed. Install nginx before running this script.",
                hints=["sudo apt install nginx"],
            )

        if ctx.php_version:
            php = f"PHP version = {ctx.php_version}"
        else:
            php = "PHP is not installed, no FastCGI block"
        return f"yes : Nginx version = {ctx.nginx_version}, {php}"


class WriteConfig(Step):
    name = "write-config"
    offers_rollback = True

    def label(self, ctx: ProvisionContext) -> str:
        return f"Creating host configuration in {ctx.paths.config_file}"

    def apply(self, ctx: ProvisionContext) -> str:
        registry = SiteRegistry(ctx.transport, ctx.settings)
        with tracking(ctx, ctx.paths.candidate_file):
            registry.write_config(ctx.paths, ctx.php_enabled)
        ctx.created.append(ctx.paths.config_file)
        return "Done."


class EnableSite(Step):
    name = "enable-site"
    offers_rollback = True

    def label(self, ctx: ProvisionContext) -> str:
        return "Enabling the web site : creating link from sites-available to sites-enabled"

    def apply(self, ctx: ProvisionContext) -> str:
        with tracking(ctx, ctx.paths.enabled_link):
            SiteRegistry(ctx.transport, ctx.settings).enable(ctx.paths)
        return "Done."


class ProvisionWebRoot(Step):
    name = "provision-web-root"
    offers_rollback = True

    def label(self, ctx: ProvisionContext) -> str:
        return (
            f"Creating {ctx.paths.web_root} "
            f"(dirs:{DIR_MODE:o} files:{FILE_MODE:o})"
        )

    def apply(self, ctx: ProvisionContext) -> str:
        with tracking(ctx, ctx.paths.web_root):
            WebRoot(ctx.transport).provision(ctx.paths, ctx.settings.owner, ctx.settings.web_group)
        return "Done."


class RegisterHostsEntry(Step):
    name = "register-hosts-entry"
    offers_rollback = True

    def label(self, ctx: ProvisionContext) -> str:
        return f"Creating a line in {ctx.paths.hosts_file} to link localhost to {ctx.host_name}"

    def apply(self, ctx: ProvisionContext) -> str:
        store = HostsFileStore(ctx.transport, ctx.paths.hosts_file, ctx.paths.hosts_backup_dir)
        backup = store.backup()
        ctx.hosts_entry = store.append(ctx.host_name)
        return f"Done. (backup: {backup})"


class ReloadWebServer(Step):
    name = "reload-web-server"
    offers_rollback = True

    def label(self, ctx: ProvisionContext) -> str:
        return f"Stopping {ctx.settings.legacy_service}, restarting {ctx.settings.service_name}"

    def apply(self, ctx: ProvisionContext) -> str:
        services = ServiceManager(ctx.transport, ctx.platform)
        legacy = ctx.settings.legacy_service
        unit = ctx.settings.service_name

        stopped = services.is_process_running(legacy)
        if stopped:
            services.stop(legacy)

        services.reload_or_restart(unit, config_file=ctx.paths.config_file)

        if not services.is_active(unit):
            raise ServiceReloadError(
                f"{unit} is not active",
                paths=[ctx.paths.config_file],
                hints=[f"systemctl status {unit}", "sudo nginx -t"],
            )

        if stopped:
            return f"Done. ({legacy} stopped)"
        return "Done."


class VerifyReachability(Step):
    name = "verify-reachability"
    offers_rollback = True

    def label(self, ctx: ProvisionContext) -> str:
        return f"Accessing {ctx.host_name} over HTTP"

    def apply(self, ctx: ProvisionContext) -> str:
        prober = Prober(ctx.http_client, timeout=ctx.settings.http_timeout)

        try:
            response = prober.get(ctx.host_name)
        except httpx.HTTPError as e:
            raise self._error(ctx, f"Cannot reach local website at {ctx.host_name}: {e}") from e

        if response.status_code != 200:
            raise self._error(
                ctx,
                f"Something went wrong... {ctx.host_name} answered {response.status_line}",
            )

        if response.first_line != ctx.host_name:
            raise self._error(
                ctx,
                f"{ctx.host_name} answered with a page for {response.first_line!r}: "
                "the request was served by another server block",
            )

        ctx.response_body = response.body
        return response.status_line

    def _error(self, ctx: ProvisionContext, message: str) -> VerificationError:
        paths = ctx.paths
        return VerificationError(
            message,
            paths=[paths.index_file, paths.hosts_file],
            hints=[
                f"Check permissions along the path : namei -l {paths.index_file}",
                f"Check the hosts file : grep {ctx.host_name} {paths.hosts_file}",
                "Check the logs : sudo tail /var/log/nginx/error.log",
            ],
        )


def default_steps():
    """The provisioning steps in execution order."""
    return [
        ValidatePreconditions(),
        DetectDependencies(),
        WriteConfig(),
        EnableSite(),
        ProvisionWebRoot(),
        RegisterHostsEntry(),
        ReloadWebServer(),
        VerifyReachability(),
    ]
