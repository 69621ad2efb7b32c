__version__ = "0.1.0"

from vhost.config import Settings, HostRequest, ProvisionPaths
from vhost.core import Pipeline, ProvisionResult, Step, StepOutcome
from vhost.errors import (
    VhostError,
    PermissionDeniedError,
    DependencyError,
    ConfigExistsError,
    LinkError,
    DirectoryExistsError,
    ServiceReloadError,
    VerificationError,
)
from vhost.provisioner import VhostProvisioner
from vhost.rollback import Rollback
from vhost.logging import get_logger, get_vhost_logger, setup_logging

"""
Foundations of nginx-vhost:
    VhostProvisioner runs the provisioning steps for one host name.
    Pipeline runs steps in order and stops at the first failure.
    Step is one provisioning action reporting a StepOutcome.
    ProvisionPaths are the files and directories derived from a host name.
    Rollback removes what a run created for a host name.
"""

__all__ = [
    "Settings",
    "HostRequest",
    "ProvisionPaths",
    "Pipeline",
    "ProvisionResult",
    "Step",
    "StepOutcome",
    "VhostError",
    "PermissionDeniedError",
    "DependencyError",
    "ConfigExistsError",
    "LinkError",
    "DirectoryExistsError",
    "ServiceReloadError",
    "VerificationError",
    "VhostProvisioner",
    "Rollback",
    "get_logger",
    "get_vhost_logger",
    "setup_logging",
]
