"""
CLI entrypoint for the deadline notification job. Run from cron, e.g.:

  python -m app.deadlines

Or hourly: 0 * * * * cd /path/to/taskflow && .venv/bin/python -m app.deadlines --force
"""

import argparse
import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.deadlines import DeadlineNotifier

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Run upcoming and missed deadline checks once."""
    parser = argparse.ArgumentParser(description="Create deadline notifications for due and overdue tasks.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore the cooldown (a fresh process has no previous run anyway).",
    )
    args = parser.parse_args(argv)

    notifier = DeadlineNotifier.from_settings(get_settings())
    db = SessionLocal()
    try:
        result = notifier.run_checks(db, force=args.force)
        logger.info(
            "Deadline job completed: upcoming=%s missed=%s duplicates_prevented=%s",
            result.upcoming_created,
            result.missed_created,
            result.duplicates_prevented,
        )
        return 0
    except Exception as e:
        logger.exception("Deadline job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
