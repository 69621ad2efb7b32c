"""
Collaborators wrapping the system state touched while provisioning.
"""

from vhost.resources.sites import SiteRegistry
from vhost.resources.hosts import HostsFileStore
from vhost.resources.webroot import WebRoot
from vhost.resources.service import ServiceManager
from vhost.resources.runtime import detect_nginx_version, detect_php_version
from vhost.resources.probe import Prober, ProbeResponse

__all__ = [
    "SiteRegistry",
    "HostsFileStore",
    "WebRoot",
    "ServiceManager",
    "Prober",
    "ProbeResponse",
    "detect_nginx_version",
    "detect_php_version",
]
