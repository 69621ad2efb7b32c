"""
Core step abstraction for nginx-vhost.

Every provisioning step (WriteConfig, EnableSite, ...) inherits from
Step and implements apply(). Steps run in a fixed order inside a
Pipeline and report a StepOutcome.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING
import platform as platform_module

import distro

from vhost.config import HostRequest, ProvisionPaths, Settings
from vhost.errors import VhostError

if TYPE_CHECKING:
    import httpx

    from vhost.transport import Transport


@dataclass
class StepOutcome:
    """Result of a single step."""
    name: str
    succeeded: bool
    message: str = ""
    error: Optional[VhostError] = None

    def __str__(self):
        status = "ok" if self.succeeded else "failed"
        return f"{self.name}: {status} ({self.message})"


@dataclass
class Platform:
    """Platform information (OS, distro, version)."""
    system: str  # Linux, Darwin
    distro: str  # ubuntu, debian, arch, etc.
    version: str
    arch: str

    @classmethod
    def detect(cls) -> "Platform":
        """Detect information about the local machine."""
        system = platform_module.system()
        arch = platform_module.machine()
        name = "unknown"
        version = ""

        if system == "Linux":
            name = distro.id() or "unknown"
            version = distro.version()
        elif system == "Darwin":
            name = "macos"
            version = platform_module.mac_ver()[0]

        return cls(system=system, distro=name, version=version, arch=arch)

    def __str__(self):
        name = f"{self.distro} {self.version}".strip()
        return f"{name} ({self.system}/{self.arch})"


@dataclass
class ProvisionContext:
    """
    State shared by the steps of one run.

    Steps read the request, paths and settings, and record what they
    detect (versions, probe body) for later steps and the final report.

    `created` lists the files, links and directories this run brought
    into existence, in creation order, and `hosts_entry` the hosts line it
    appended; a rollback removes only those.
    """
    request: HostRequest
    settings: Settings
    transport: "Transport"
    paths: ProvisionPaths = field(init=False)
    platform: Optional[Platform] = None
    php_version: Optional[str] = None
    nginx_version: Optional[str] = None
    http_client: Optional["httpx.Client"] = None
    response_body: Optional[str] = None
    created: List[str] = field(default_factory=list)
    hosts_entry: Optional[str] = None

    def __post_init__(self):
        self.paths = ProvisionPaths.for_host(self.request, self.settings)

    @property
    def host_name(self) -> str:
        return self.request.host_name

    @property
    def php_enabled(self) -> bool:
        return bool(self.php_version)


class Step(ABC):
    """
    Base class for all provisioning steps.

    Subclasses set `name` and implement apply(), which performs the
    mutation and returns a short status text, or raises a VhostError.
    """

    name: str = "step"

    # Failures from this step on leave artifacts behind worth rolling back
    offers_rollback: bool = False

    @abstractmethod
    def apply(self, ctx: ProvisionContext) -> str:
        """
        Perform the step.

        Args:
            ctx: Context of the current run

        Returns:
            Status text for the progress line

        Raises:
            VhostError subclass on failure
        """
        pass

    def label(self, ctx: ProvisionContext) -> str:
        """Text of the progress line for this step."""
        return self.name

    def run(self, ctx: ProvisionContext) -> StepOutcome:
        """Run apply() and turn its result or VhostError into an outcome."""
        try:
            message = self.apply(ctx)
        except VhostError as e:
            return StepOutcome(self.name, False, e.message, e)
        return StepOutcome(self.name, True, message)

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name!r})"

    def __str__(self):
        return self.name
