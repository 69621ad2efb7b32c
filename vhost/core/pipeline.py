"""
Pipeline - runs provisioning steps in order.

The pipeline:
1. Runs each step, printing a progress line
2. Stops at the first failed step (no retries)
3. Offers a rollback when the failed step may have left artifacts

An OSError from a step offering rollback fails that step like a
VhostError does; from earlier steps it propagates.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional
import time

from vhost.config import ProvisionPaths
from vhost.core.step import ProvisionContext, Step, StepOutcome
from vhost.errors import VhostError
from vhost.logging import VhostLogger, get_vhost_logger

# Asked before undoing a failed run; True means roll back
ConfirmRollback = Callable[[ProvisionPaths], bool]


def decline_rollback(paths: ProvisionPaths) -> bool:
    return False


@dataclass
class ProvisionResult:
    """
    Result of a pipeline run.

    Holds one outcome per step that ran, in order.
    """
    outcomes: List[StepOutcome] = field(default_factory=list)
    rollback_offered: bool = False
    rolled_back: bool = False
    duration: float = 0.0

    @property
    def success(self) -> bool:
        """True when every step ran and succeeded."""
        return bool(self.outcomes) and all(o.succeeded for o in self.outcomes)

    @property
    def failed_step(self) -> Optional[StepOutcome]:
        """Outcome of the step that halted the run."""
        for outcome in self.outcomes:
            if not outcome.succeeded:
                return outcome
        return None

    @property
    def error(self) -> Optional[VhostError]:
        failed = self.failed_step
        return failed.error if failed else None

    @property
    def completed_steps(self) -> List[str]:
        return [o.name for o in self.outcomes if o.succeeded]


class Pipeline:
    """
    Ordered list of steps with stop-on-first-failure semantics.

    Example:
        pipeline = Pipeline(confirm_rollback=lambda paths: True)
        pipeline.add(WriteConfig())
        pipeline.add(EnableSite())

        result = pipeline.run(ctx)
        if not result.success:
            print(result.failed_step)
    """

    def __init__(
        self,
        confirm_rollback: Optional[ConfirmRollback] = None,
        reporter: Optional[VhostLogger] = None,
    ):
        """
        Initialize pipeline.

        Args:
            confirm_rollback: Callback deciding whether to undo a failed run
                (default: never roll back)
            reporter: Console reporter for progress lines
        """
        self.confirm_rollback = confirm_rollback or decline_rollback
        self.reporter = reporter or get_vhost_logger(__name__)
        self.steps: List[Step] = []

    def add(self, step: Step) -> Step:
        """
        Append a step.

        Raises:
            ValueError: If a step with the same name was already added
        """
        if any(s.name == step.name for s in self.steps):
            raise ValueError(f"Duplicate step: {step.name}")
        self.steps.append(step)
        return step

    def run(self, ctx: ProvisionContext) -> ProvisionResult:
        """
        Run all steps against the context.

        Returns:
            ProvisionResult with one outcome per executed step
        """
        result = ProvisionResult()
        start_time = time.time()

        for step in self.steps:
            self.reporter.step(step.label(ctx))
            try:
                outcome = step.run(ctx)
            except OSError as e:
                if not step.offers_rollback:
                    raise
                outcome = self._os_failure(step, e)
            result.outcomes.append(outcome)

            if outcome.succeeded:
                self.reporter.done(outcome.message or "Done.")
                continue

            self.reporter.failed()
            self.reporter.debug("step %s failed: %s", step.name, outcome.message)

            if step.offers_rollback:
                result.rollback_offered = True
                result.rolled_back = self._offer_rollback(ctx)
            break

        result.duration = time.time() - start_time
        return result

    def _offer_rollback(self, ctx: ProvisionContext) -> bool:
        """Ask the callback and undo the run if it agrees."""
        from vhost.rollback import Rollback

        if not self.confirm_rollback(ctx.paths):
            self.reporter.info("Rollback declined, leaving partial state in place")
            return False

        Rollback(
            ctx.paths,
            ctx.transport,
            settings=ctx.settings,
            reporter=self.reporter,
            created=ctx.created,
            hosts_entry=ctx.hosts_entry,
        ).run()
        return True

    def _os_failure(self, step: Step, error: OSError) -> StepOutcome:
        """Outcome for a system error raised once the run has started mutating."""
        wrapped = VhostError(f"{step.name} failed: {error}")
        wrapped.__cause__ = error
        return StepOutcome(step.name, False, wrapped.message, wrapped)
