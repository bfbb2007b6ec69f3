"""
Shared entry point for the migration scripts in ``backend/scripts``.

Exit codes:
    0  every step applied or skipped
    1  a step failed (rolled back) or the database could not be reached
    2  DATABASE_URL is not configured
    3  destructive run without confirmation
"""

import argparse
import logging
import sys
from typing import Callable, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from listings.core.database import connection_scope, get_engine
from listings.core.exceptions import (
    ConfigurationError,
    ConfirmationRequiredError,
    MigrationError,
)
from listings.migrations.step import MigrationStep, StepStatus, destructive_step_names, run_steps

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MISSING_CONFIG = 2
EXIT_CONFIRMATION_REQUIRED = 3

CONFIRMATION_TEXT = "YES"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def configure_logging(level: int = logging.INFO):
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_parser(
    description: Optional[str],
    add_arguments: Optional[Callable[[argparse.ArgumentParser], None]] = None,
) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=description,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    if add_arguments is not None:
        add_arguments(parser)
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Allow destructive steps (drop, truncate, delete) to run",
    )
    return parser


def _ask_for_confirmation(destructive: list[str], prompt: Callable[[str], str]) -> bool:
    """Typed confirmation, only offered on an interactive terminal."""
    if not sys.stdin.isatty():
        return False
    logger.warning("WARNING: the following steps delete data:")
    for name in destructive:
        logger.warning(f"  - {name}")
    answer = prompt(f'Type "{CONFIRMATION_TEXT}" to confirm: ')
    return answer.strip() == CONFIRMATION_TEXT


def run_migration(
    description: Optional[str],
    steps_factory: Callable[..., list[MigrationStep]],
    argv: Optional[Sequence[str]] = None,
    engine: Optional[Engine] = None,
    prompt: Callable[[str], str] = input,
    add_arguments: Optional[Callable[[argparse.ArgumentParser], None]] = None,
) -> int:
    """
    Parse arguments, run the steps on one scoped connection, return an exit code.

    Scripts with positional arguments pass ``add_arguments``; their
    steps_factory then receives the parsed namespace.

    Confirmation is checked before any configuration or connection work, so a
    refused destructive run never touches the database.
    """
    args = build_parser(description, add_arguments).parse_args(argv)
    steps = steps_factory(args) if add_arguments is not None else steps_factory()

    destructive = destructive_step_names(steps)
    confirmed = args.confirm
    if destructive and not confirmed:
        confirmed = _ask_for_confirmation(destructive, prompt)
    if destructive and not confirmed:
        logger.error("Refusing to run destructive steps without confirmation.")
        logger.error("Re-run with --confirm to proceed.")
        return EXIT_CONFIRMATION_REQUIRED

    try:
        engine = engine or get_engine()
    except (ConfigurationError, ArgumentError) as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_MISSING_CONFIG

    try:
        with connection_scope(engine) as conn:
            results = run_steps(conn, steps, confirm=confirmed)
    except ConfirmationRequiredError as e:
        logger.error(str(e))
        return EXIT_CONFIRMATION_REQUIRED
    except MigrationError as e:
        logger.error(f"Migration aborted: {e}")
        return EXIT_FAILURE
    except SQLAlchemyError as e:
        logger.exception(f"Database error: {e}")
        return EXIT_FAILURE

    applied = sum(1 for r in results if r.status == StepStatus.APPLIED)
    skipped = sum(1 for r in results if r.status == StepStatus.SKIPPED)
    logger.info(f"Migration summary: {applied} applied, {skipped} skipped, {len(results)} total")
    return EXIT_OK


def main(
    description: Optional[str],
    steps_factory: Callable[..., list[MigrationStep]],
    add_arguments: Optional[Callable[[argparse.ArgumentParser], None]] = None,
):
    """Script entry point: configure logging and exit with the run's status."""
    configure_logging()
    sys.exit(run_migration(description, steps_factory, add_arguments=add_arguments))
