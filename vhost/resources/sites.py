"""
Site registry - server-block configs in sites-available/sites-enabled.

Handles:
- Rendering the server block (Jinja2)
- Writing it through a candidate file
- Enabling it with a symlink
- Removing a config, candidate or link
"""

from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from vhost.config import ProvisionPaths, Settings
from vhost.errors import ConfigExistsError, DependencyError, LinkError
from vhost.logging import get_logger
from vhost.transport import Transport

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
SERVER_BLOCK_TEMPLATE = "server_block.conf.j2"


class SiteRegistry:
    """
    Manages server-block configs for one Nginx installation.

    Example:
        registry = SiteRegistry(transport, settings)
        registry.write_config(paths, php_enabled=True)
        registry.enable(paths)
    """

    def __init__(self, transport: Transport, settings: Settings):
        self.transport = transport
        self.settings = settings
        self._env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

    def render(self, paths: ProvisionPaths, php_enabled: bool) -> str:
        """
        Render the server block for a host.

        Args:
            paths: Paths of the host
            php_enabled: Include the FastCGI location block
        """
        variables: Dict[str, Any] = {
            "host_name": paths.host_name,
            "web_root": paths.web_root,
            "listen_port": self.settings.listen_port,
            "fastcgi_socket": self.settings.fastcgi_socket,
            "php_enabled": php_enabled,
        }
        template = self._env.get_template(SERVER_BLOCK_TEMPLATE)
        return template.render(**variables)

    def write_config(self, paths: ProvisionPaths, php_enabled: bool) -> str:
        """
        Write the config for a host, refusing to replace an existing one.

        The content goes to a candidate file first and is moved into
        place only when the target is still absent.

        Returns:
            Path of the written config

        Raises:
            DependencyError: sites-available is missing
            ConfigExistsError: The config already exists
        """
        if not self.transport.file_exists(self.settings.sites_available):
            raise DependencyError(
                f"Directory {self.settings.sites_available} does not exist. "
                "Are you sure Nginx is installed ?",
                paths=[self.settings.sites_available],
            )

        if self.transport.file_exists(paths.config_file):
            raise self._exists_error(paths)

        if self.transport.file_exists(paths.candidate_file):
            logger.debug("removing stale candidate %s", paths.candidate_file)
            self.remove(paths.candidate_file)

        content = self.render(paths, php_enabled)
        self.transport.write_file(paths.candidate_file, content.encode("utf-8"))

        # Another run may have won the race since the first check
        if self.transport.file_exists(paths.config_file):
            self.remove(paths.candidate_file)
            raise self._exists_error(paths)

        output, code = self.transport.run_command(
            ["mv", paths.candidate_file, paths.config_file]
        )
        if code != 0:
            raise OSError(f"Could not move {paths.candidate_file} into place: {output.strip()}")

        logger.debug("wrote %s", paths.config_file)
        return paths.config_file

    def enable(self, paths: ProvisionPaths) -> str:
        """
        Link the config into sites-enabled.

        Raises:
            LinkError: The link could not be created
        """
        output, code = self.transport.run_command(
            ["ln", "-s", paths.config_file, paths.enabled_link]
        )
        if code != 0:
            raise LinkError(
                f"Cannot create link {paths.enabled_link}: {output.strip()}\n"
                f"Please remove link {paths.enabled_link} and restart this script.",
                paths=[paths.enabled_link, paths.config_file],
                hints=[f"sudo rm {paths.enabled_link}"],
            )
        return paths.enabled_link

    def remove(self, path: str) -> None:
        """Remove a config, candidate or link (rm -f, a missing file is fine)."""
        output, code = self.transport.run_command(["rm", "-f", path])
        if code != 0:
            raise OSError(f"Could not remove {path}: {output.strip()}")

    def _exists_error(self, paths: ProvisionPaths) -> ConfigExistsError:
        return ConfigExistsError(
            f"Error : file {paths.config_file} already exists.\n"
            "Choose another host name or remove this file manually "
            "and run this script again.",
            paths=[paths.config_file],
            hints=[f"sudo rm {paths.config_file}"],
        )
