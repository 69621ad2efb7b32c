"""
Core nginx-vhost functionality.

Exports the step abstraction and the pipeline running it.
"""

from vhost.core.step import Step, StepOutcome, ProvisionContext, Platform
from vhost.core.pipeline import Pipeline, ProvisionResult, ConfirmRollback

__all__ = [
    "Step",
    "StepOutcome",
    "ProvisionContext",
    "Platform",
    "Pipeline",
    "ProvisionResult",
    "ConfirmRollback",
]
