"""
Configuration for nginx-vhost.

Centralizes the paths, names and service units the provisioning steps
touch. Defaults match a Debian/Ubuntu Nginx layout; every field can be
overridden from the environment or from CLI options.
"""

import getpass
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Optional

ENV_PREFIX = "NGINX_VHOST_"
LOCALHOST_IP = "127.0.0.1"

# Field name -> environment variable suffix
ENV_FIELDS = {
    "nginx_dir": "NGINX_DIR",
    "web_root_base": "WEB_ROOT",
    "hosts_file": "HOSTS_FILE",
    "hosts_backup_dir": "BACKUP_DIR",
    "web_group": "GROUP",
    "service_name": "SERVICE",
    "legacy_service": "LEGACY_SERVICE",
    "fastcgi_socket": "FASTCGI_SOCKET",
    "http_timeout": "HTTP_TIMEOUT",
    "owner": "OWNER",
}


def invoking_user() -> str:
    """
    Return the user who started the tool, even when run under sudo.
    """
    return os.environ.get("SUDO_USER") or getpass.getuser()


@dataclass
class Settings:
    """Tunable locations and names used while provisioning."""
    nginx_dir: str = "/etc/nginx"
    web_root_base: str = "/var/www"
    hosts_file: str = "/etc/hosts"
    hosts_backup_dir: str = "/var/backups/nginx-vhost"
    web_group: str = "www-data"
    service_name: str = "nginx.service"
    legacy_service: str = "apache2"
    fastcgi_socket: str = "/var/run/php/php-fpm.sock"
    listen_port: int = 80
    http_timeout: float = 10.0
    owner: str = field(default_factory=invoking_user)

    @property
    def sites_available(self) -> str:
        return str(Path(self.nginx_dir) / "sites-available")

    @property
    def sites_enabled(self) -> str:
        return str(Path(self.nginx_dir) / "sites-enabled")

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides) -> "Settings":
        """
        Build settings from NGINX_VHOST_* variables.

        Args:
            environ: Mapping to read (defaults to os.environ)
            **overrides: Explicit values; None entries are ignored

        Example:
            Settings.from_env(web_group="http")
        """
        environ = os.environ if environ is None else environ
        types = {f.name: f.type for f in fields(cls)}
        values = {}

        for name, suffix in ENV_FIELDS.items():
            raw = environ.get(ENV_PREFIX + suffix)
            if raw:
                values[name] = float(raw) if types[name] in (float, "float") else raw

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class HostRequest:
    """A validated host name to provision."""
    host_name: str

    def __post_init__(self):
        if not self.host_name or not self.host_name.strip():
            raise ValueError("host name must not be empty")
        if self.host_name.startswith("-"):
            raise ValueError(f"host name must not start with '-': {self.host_name!r}")


@dataclass(frozen=True)
class ProvisionPaths:
    """Filesystem locations derived from a host name."""
    host_name: str
    config_file: str
    candidate_file: str
    enabled_link: str
    web_root: str
    index_file: str
    hosts_file: str
    hosts_backup_dir: str

    @classmethod
    def for_host(cls, request: HostRequest, settings: Settings) -> "ProvisionPaths":
        """
        Derive every path touched for this host.

        The config name must end with ".conf" to be picked up by the
        default nginx.conf include.
        """
        name = request.host_name
        config_file = Path(settings.sites_available) / f"{name}.conf"
        web_root = Path(settings.web_root_base) / name

        return cls(
            host_name=name,
            config_file=str(config_file),
            candidate_file=f"{config_file}.candidate",
            enabled_link=str(Path(settings.sites_enabled) / f"{name}.conf"),
            web_root=str(web_root),
            index_file=str(web_root / "index.html"),
            hosts_file=settings.hosts_file,
            hosts_backup_dir=settings.hosts_backup_dir,
        )

    def cleanup_commands(self):
        """Manual commands undoing a (partial) run."""
        return [
            f"Clean up {self.hosts_file} : remove this line manually : "
            f"{LOCALHOST_IP} {self.host_name}",
            f"sudo rm {self.config_file}",
            f"sudo rm {self.enabled_link}",
            f"sudo rm -r {self.web_root}",
        ]

    def edit_commands(self):
        """Commands to inspect the files a run modifies."""
        return [
            f"sudo vim {self.config_file}",
            f"sudo vim {self.hosts_file}",
        ]
