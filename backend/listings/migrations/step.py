"""
Idempotent migration steps.

A step pairs a guard ("is the target state already there?") with an action
that is only run when the guard says no. Each step runs in its own
transaction on the caller's connection: a failure rolls back that step and
stops the run, earlier steps stay committed.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from sqlalchemy.engine import Connection

from listings.core.exceptions import ConfirmationRequiredError, MigrationError

logger = logging.getLogger(__name__)

Guard = Callable[[Connection], bool]
Action = Callable[[Connection], Optional[int]]


class StepStatus(str, enum.Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"


@dataclass
class MigrationStep:
    """
    One unit of schema or data change.

    Attributes:
        name: Human readable label used in logs
        action: Performs the change; may return an affected row count
        guard: Returns True when the change is already in place
        destructive: Drops or deletes data; only runs with confirmation
    """
    name: str
    action: Action
    guard: Optional[Guard] = None
    destructive: bool = False

    def is_satisfied(self, conn: Connection) -> bool:
        return self.guard is not None and self.guard(conn)


@dataclass
class StepResult:
    name: str
    status: StepStatus
    rowcount: Optional[int] = None


def destructive_step_names(steps: Iterable[MigrationStep]) -> list[str]:
    return [step.name for step in steps if step.destructive]


def run_step(conn: Connection, step: MigrationStep) -> StepResult:
    """Run a single step in its own transaction."""
    try:
        with conn.begin():
            if step.is_satisfied(conn):
                logger.info(f"Skipped: {step.name} (already applied)")
                return StepResult(step.name, StepStatus.SKIPPED)

            logger.info(f"Running: {step.name}...")
            rowcount = step.action(conn)
    except Exception as e:
        logger.exception(f"Failed: {step.name}; changes from this step were rolled back")
        raise MigrationError(step.name, e) from e

    if rowcount is not None and rowcount >= 0:
        logger.info(f"Applied: {step.name} ({rowcount} rows)")
    else:
        logger.info(f"Applied: {step.name}")
    return StepResult(step.name, StepStatus.APPLIED, rowcount)


def run_steps(
    conn: Connection,
    steps: list[MigrationStep],
    confirm: bool = False,
) -> list[StepResult]:
    """
    Run steps in order, stopping at the first failure.

    Raises:
        ConfirmationRequiredError: a step is destructive and confirm is False.
            Raised before anything is executed.
        MigrationError: a step failed; its transaction was rolled back.
    """
    destructive = destructive_step_names(steps)
    if destructive and not confirm:
        raise ConfirmationRequiredError(destructive)

    results = []
    for step in steps:
        results.append(run_step(conn, step))
    return results
