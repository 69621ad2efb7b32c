"""
Runtime detection - PHP and Nginx versions.
"""

import re
from typing import Optional

from vhost.transport import Transport

PHP_VERSION_CMD = ["php", "-r", 'echo PHP_MAJOR_VERSION . "." . PHP_MINOR_VERSION;']
NGINX_VERSION_CMD = ["nginx", "-v"]

# nginx -v prints "nginx version: nginx/1.24.0 (Ubuntu)" on stderr
NGINX_VERSION_RE = re.compile(r"nginx/(\S+)")
PHP_VERSION_RE = re.compile(r"^\d+\.\d+$")


def detect_php_version(transport: Transport) -> Optional[str]:
    """Return "major.minor" of the PHP CLI, or None when PHP is absent."""
    output, code = transport.run_command(PHP_VERSION_CMD)
    version = output.strip()
    if code != 0 or not PHP_VERSION_RE.match(version):
        return None
    return version


def detect_nginx_version(transport: Transport) -> Optional[str]:
    """Return the Nginx version, or None when Nginx is absent."""
    output, code = transport.run_command(NGINX_VERSION_CMD)
    if code != 0:
        return None
    match = NGINX_VERSION_RE.search(output)
    return match.group(1) if match else None
