"""Delete notifications whose expiry date has passed."""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.notifications import NotificationService
from app.config import get_settings
from app.infrastructure.database import SessionLocal, initialize_database
from app.infrastructure.notifications import RealtimeDispatcher
from app.infrastructure.repositories import NotificationRepository


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Remove expired notifications from the database.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many notifications are expired without deleting them.",
    )
    return parser.parse_args()


def main() -> None:
    """Run the cleanup once and print how many rows were removed."""

    args = parse_args()
    logging.basicConfig(level=get_settings().log_level)

    initialize_database()

    session = SessionLocal()
    try:
        if args.dry_run:
            print(f"Expired notifications: {NotificationRepository(session).count_expired()}")
            return
        # No websocket sessions live in this process.
        service = NotificationService(session, RealtimeDispatcher(None))
        deleted = service.cleanup_expired_notifications()
    except SQLAlchemyError as exc:
        raise SystemExit(f"Could not clean up notifications: {exc}") from exc
    finally:
        session.close()
    print(f"Deleted {deleted} expired notifications")


if __name__ == "__main__":
    main()
