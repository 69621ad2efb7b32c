"""
Errors raised by provisioning steps.

Every error carries the paths it concerns and the remediation
commands shown to the operator. All of them end the run.
"""

from typing import List, Optional, Sequence


class VhostError(Exception):
    """Base class for provisioning failures."""

    def __init__(
        self,
        message: str,
        paths: Optional[Sequence[str]] = None,
        hints: Optional[Sequence[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.paths: List[str] = [str(p) for p in paths or []]
        self.hints: List[str] = list(hints or [])


class PermissionDeniedError(VhostError, PermissionError):
    """Not running as root, or the invoking user is not in the web group."""


class DependencyError(VhostError):
    """Nginx (or the web root base it installs) is missing."""


class ConfigExistsError(VhostError):
    """The server-block config for this host already exists."""


class LinkError(VhostError):
    """The sites-enabled symlink could not be created."""


class DirectoryExistsError(VhostError):
    """The web root for this host already exists."""


class ServiceReloadError(VhostError):
    """The web server could not be reloaded or is not active afterwards."""


class VerificationError(VhostError):
    """The host did not answer with its own test page."""
