"""
Service control - stop the legacy web server, reload Nginx.

Supports:
- systemd (Linux)
- SysV `service` wrapper for the legacy server
"""

from typing import Optional

from vhost.core.step import Platform
from vhost.errors import ServiceReloadError
from vhost.logging import get_logger
from vhost.transport import Transport

logger = get_logger(__name__)


class ServiceManager:
    """
    Runs service commands through a transport.

    Example:
        services = ServiceManager(transport, platform)
        if services.is_process_running("apache2"):
            services.stop("apache2")
        services.reload_or_restart("nginx.service")
    """

    def __init__(self, transport: Transport, platform: Optional[Platform] = None):
        self.transport = transport
        self.platform = platform

    def _require_linux(self, unit: str) -> None:
        if self.platform is not None and self.platform.system != "Linux":
            raise ServiceReloadError(
                f"Cannot manage {unit} on {self.platform.system}: only systemd is supported",
            )

    def is_process_running(self, name: str) -> bool:
        """Check for a running process with this name."""
        _, code = self.transport.run_command(["pidof", name])
        return code == 0

    def stop(self, name: str) -> None:
        """Stop a service with the `service` wrapper."""
        output, code = self.transport.run_command(["service", name, "stop"])
        if code != 0:
            raise ServiceReloadError(
                f"{name} service cannot be stopped: {output.strip()}",
                hints=[f"sudo service {name} stop", f"sudo systemctl disable --now {name}"],
            )

    def reload_or_restart(self, unit: str, config_file: Optional[str] = None) -> None:
        """Reload the unit, restarting it when it is not running."""
        self._require_linux(unit)
        output, code = self.transport.run_command(["systemctl", "reload-or-restart", unit])
        if code != 0:
            message = f"{unit} cannot be restarted."
            if config_file:
                message += f" Check config file : {config_file}"
            raise ServiceReloadError(
                f"{message}\n{output.strip()}".strip(),
                paths=[config_file] if config_file else [],
                hints=["sudo nginx -t", f"systemctl status {unit}", f"journalctl -xeu {unit}"],
            )

    def is_active(self, unit: str) -> bool:
        """Check the unit reports an active state."""
        self._require_linux(unit)
        _, code = self.transport.run_command(["systemctl", "is-active", "--quiet", unit])
        return code == 0
