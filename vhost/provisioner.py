"""
VhostProvisioner - entry point tying settings, transport and steps together.
"""

from typing import List, Optional

import httpx

from vhost.config import HostRequest, ProvisionPaths, Settings
from vhost.core.pipeline import ConfirmRollback, Pipeline, ProvisionResult
from vhost.core.step import Platform, ProvisionContext, Step, StepOutcome
from vhost.logging import VhostLogger, get_vhost_logger
from vhost.rollback import Rollback, RollbackReport
from vhost.steps import ValidatePreconditions, default_steps
from vhost.transport import LocalTransport, Transport


class VhostProvisioner:
    """
    Provisions a local Nginx virtual host.

    Example:
        provisioner = VhostProvisioner(confirm_rollback=lambda paths: True)
        result = provisioner.provision("test.local")
        if not result.success:
            print(result.error)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[Transport] = None,
        confirm_rollback: Optional[ConfirmRollback] = None,
        reporter: Optional[VhostLogger] = None,
        http_client: Optional[httpx.Client] = None,
        platform: Optional[Platform] = None,
        steps: Optional[List[Step]] = None,
    ):
        """
        Args:
            settings: Locations and names (default: Settings.from_env())
            transport: Where commands run (default: LocalTransport)
            confirm_rollback: Asked after a failure; True undoes the run
            reporter: Console reporter
            http_client: Client used by the reachability probe
            platform: Skip platform detection with a known platform
            steps: Replace the default step list
        """
        self.settings = settings or Settings.from_env()
        self.transport = transport or LocalTransport()
        self.confirm_rollback = confirm_rollback
        self.reporter = reporter or get_vhost_logger(__name__)
        self.http_client = http_client
        self.platform = platform
        self.steps = steps if steps is not None else default_steps()
        self.last_context: Optional[ProvisionContext] = None

    def paths_for(self, host_name: str) -> ProvisionPaths:
        return ProvisionPaths.for_host(HostRequest(host_name), self.settings)

    def build_pipeline(self) -> Pipeline:
        pipeline = Pipeline(confirm_rollback=self.confirm_rollback, reporter=self.reporter)
        for step in self.steps:
            pipeline.add(step)
        return pipeline

    def provision(self, host_name: str) -> ProvisionResult:
        """
        Run every step for host_name.

        Raises:
            ValueError: host_name is empty or starts with '-'
        """
        ctx = ProvisionContext(
            request=HostRequest(host_name),
            settings=self.settings,
            transport=self.transport,
            platform=self.platform,
            http_client=self.http_client,
        )
        self.last_context = ctx
        return self.build_pipeline().run(ctx)

    def check_preconditions(self, host_name: str) -> StepOutcome:
        """Run only the privilege and group checks."""
        ctx = ProvisionContext(HostRequest(host_name), self.settings, self.transport)
        return ValidatePreconditions().run(ctx)

    def rollback(self, host_name: str) -> RollbackReport:
        """Remove everything a run creates for host_name."""
        paths = self.paths_for(host_name)
        return Rollback(paths, self.transport, settings=self.settings, reporter=self.reporter).run()
