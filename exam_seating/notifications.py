"""
Notification sinks.

The sink is picked once at startup (``build_sink_factory``) and handed to the
workflow per request, so callers never check whether notifications are on.
Delivery is best effort: a failing sink raises DependencyFailure and the
caller decides what to do with it.
"""

import logging
from typing import Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from exam_seating.db_models import NotificationDB
from exam_seating.exceptions import DependencyFailure

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("seating", "marks", "attendance", "general")


class NotificationSink:
    enabled = True

    def enqueue(self, recipient_id, title: str, message: str, type: str = "general", link: Optional[str] = None) -> int:
        return self.enqueue_many([recipient_id], title, message, type, link)

    def enqueue_many(self, recipient_ids: Iterable, title: str, message: str,
                     type: str = "general", link: Optional[str] = None) -> int:
        raise NotImplementedError


class DatabaseNotificationSink(NotificationSink):
    """Stores in-app notifications, one row per recipient"""

    def __init__(self, db: Session):
        self.db = db

    def enqueue_many(self, recipient_ids, title, message, type="general", link=None):
        if type not in NOTIFICATION_TYPES:
            type = "general"

        rows = [
            NotificationDB(recipient_id=rid, title=title, message=message, type=type, link=link)
            for rid in recipient_ids
        ]
        if not rows:
            return 0

        try:
            self.db.add_all(rows)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DependencyFailure("Notification dispatch", str(e)) from e

        logger.info("Queued %d '%s' notifications", len(rows), type)
        return len(rows)


class DisabledNotificationSink(NotificationSink):
    enabled = False

    def __init__(self, db: Optional[Session] = None):
        self.db = db

    def enqueue_many(self, recipient_ids, title, message, type="general", link=None):
        count = len(list(recipient_ids))
        logger.info("Notifications disabled, dropped %d '%s' notifications", count, type)
        return 0


def build_sink_factory(enabled: bool) -> Callable[[Session], NotificationSink]:
    if enabled:
        return DatabaseNotificationSink
    logger.warning("Notifications are disabled, students will not be notified of seating plans")
    return DisabledNotificationSink


def list_notifications(db: Session, recipient_id: int, limit: int = 10):
    return (
        db.query(NotificationDB)
        .filter(NotificationDB.recipient_id == recipient_id)
        .order_by(NotificationDB.created_at.desc(), NotificationDB.id.desc())
        .limit(limit)
        .all()
    )


def mark_as_read(db: Session, notification_id: int, recipient_id: int) -> bool:
    """Mark one of the recipient's notifications read, False if there is no such notification"""
    updated = (
        db.query(NotificationDB)
        .filter(NotificationDB.id == notification_id)
        .filter(NotificationDB.recipient_id == recipient_id)
        .update({NotificationDB.is_read: True}, synchronize_session = False)
    )
    db.commit()
    return updated > 0
