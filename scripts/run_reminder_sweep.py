"""Run the event reminder sweep once, e.g. from a daily scheduler."""

from __future__ import annotations

import argparse
import logging
from datetime import datetime

from app.application.use_cases.membership import reconcile_memberships
from app.application.use_cases.reminders import run_reminder_sweep
from app.domain.errors import EngineError
from app.infrastructure.database import SessionLocal, initialize_database
from app.utils import ensure_app_timezone


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the sweep."""

    parser = argparse.ArgumentParser(
        description="Append same-day reminders to the inboxes of event attendees.",
    )
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="ISO-8601 instant to evaluate instead of the current time",
    )
    parser.add_argument(
        "--reconcile",
        action="store_true",
        help="Also repair group rosters that drifted from member pointers",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    initialize_database()
    session = SessionLocal()
    try:
        result = run_reminder_sweep(session, now=ensure_app_timezone(args.now))
        if args.reconcile:
            reconcile_memberships(session)
    except EngineError as exc:
        raise SystemExit(f"Sweep failed: {exc}") from exc
    finally:
        session.close()

    print(
        f"Reminders appended: {len(result.applied)}\n"
        f"Already present: {len(result.skipped)}\n"
        f"Failed: {len(result.failures)}"
    )
    if result.failures:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
