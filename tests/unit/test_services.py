"""
Unit tests for runtime detection and service control.
"""

import pytest

from vhost.core.step import Platform
from vhost.errors import ServiceReloadError
from vhost.resources.runtime import detect_nginx_version, detect_php_version
from vhost.resources.service import ServiceManager


class TestRuntimeDetection:
    """PHP and Nginx version queries."""

    def test_php_present(self, transport):
        transport.respond("php", "8.3", 0)
        assert detect_php_version(transport) == "8.3"

    def test_php_missing(self, transport):
        transport.respond("php", "[Errno 2] No such file or directory: 'php'", 127)
        assert detect_php_version(transport) is None

    def test_php_garbage_output(self, transport):
        transport.respond("php", "PHP Warning: something\n", 0)
        assert detect_php_version(transport) is None

    def test_nginx_version_parsed_from_stderr_text(self, transport):
        transport.respond("nginx", "nginx version: nginx/1.18.0 (Ubuntu)\n", 0)
        assert detect_nginx_version(transport) == "1.18.0"

    def test_nginx_missing(self, transport):
        transport.respond("nginx", "", 127)
        assert detect_nginx_version(transport) is None


class TestServiceManager:
    """Legacy server stop and Nginx reload."""

    def test_process_running(self, transport, linux):
        transport.respond("pidof", "1234", 0)
        assert ServiceManager(transport, linux).is_process_running("apache2")

    def test_process_not_running(self, transport, linux):
        assert not ServiceManager(transport, linux).is_process_running("apache2")

    def test_stop_failure(self, transport, linux):
        transport.respond("service apache2 stop", "failed", 1)

        with pytest.raises(ServiceReloadError):
            ServiceManager(transport, linux).stop("apache2")

    def test_reload_or_restart(self, transport, linux):
        ServiceManager(transport, linux).reload_or_restart("nginx.service")
        assert ["systemctl", "reload-or-restart", "nginx.service"] in transport.calls

    def test_reload_failure_names_config(self, transport, linux):
        transport.respond("systemctl reload-or-restart nginx.service", "Job failed", 1)

        with pytest.raises(ServiceReloadError) as exc_info:
            ServiceManager(transport, linux).reload_or_restart(
                "nginx.service", config_file="/etc/nginx/sites-available/a.conf"
            )

        assert "/etc/nginx/sites-available/a.conf" in exc_info.value.message
        assert "sudo nginx -t" in exc_info.value.hints

    def test_is_active(self, transport, linux):
        services = ServiceManager(transport, linux)
        assert services.is_active("nginx.service")

        transport.respond("systemctl is-active --quiet nginx.service", "", 3)
        assert not services.is_active("nginx.service")

    def test_non_linux_unsupported(self, transport):
        darwin = Platform(system="Darwin", distro="macos", version="14.0", arch="arm64")

        with pytest.raises(ServiceReloadError):
            ServiceManager(transport, darwin).reload_or_restart("nginx.service")


class TestPlatformDetection:
    """Unit tests for platform detection."""

    def test_platform_detect(self):
        platform = Platform.detect()
        assert platform.system.lower() in ["darwin", "linux", "windows"]
