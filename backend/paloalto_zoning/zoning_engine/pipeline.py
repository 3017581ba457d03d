"""
Five-phase workflow runner shared by the planning and validation engines.

Each phase receives the results of every phase before it (keyed
"phase1".."phaseN") and returns its own result. Only phase 1 may stop a
run early; any other failure is caught, logged, and reported on the
outcome with the phases that did complete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Generic, Optional, Sequence, TypeVar

from paloalto_zoning.zoning_engine.zone_table import UnknownZoneError

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass
class PhaseStep(Generic[R]):
    """One phase: a key ("phase1"), a display name, and the phase function."""
    key: str
    name: str
    run: Callable[[dict[str, R]], R]


@dataclass
class PipelineOutcome(Generic[R]):
    results: dict[str, R] = field(default_factory=dict)
    stopped: bool = False
    error: Optional[str] = None


def run_phases(
    steps: Sequence[PhaseStep[R]],
    should_stop: Callable[[R], bool],
) -> PipelineOutcome[R]:
    """Run *steps* in order, threading prior results forward."""
    outcome: PipelineOutcome[R] = PipelineOutcome()
    for index, step in enumerate(steps):
        try:
            result = step.run(dict(outcome.results))
        except UnknownZoneError:
            raise
        except Exception as exc:
            logger.exception("Workflow phase %s (%s) failed: %s", step.key, step.name, exc)
            outcome.error = f"{step.name}: {exc}"
            return outcome

        outcome.results[step.key] = result
        logger.debug("Workflow phase %s (%s) finished", step.key, step.name)

        if index == 0 and should_stop(result):
            outcome.stopped = True
            return outcome
    return outcome
