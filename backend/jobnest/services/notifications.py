from __future__ import annotations

import asyncio
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.orm import Session

from jobnest.models.notification import Notification
from jobnest.schemas.notification import NotificationOut


logger = logging.getLogger(__name__)


STATUS_MESSAGES = {
    "pending": "Your application status has been updated to pending.",
    "reviewed": "Your application has been reviewed by the company.",
    "shortlisted": "Good news! You have been shortlisted.",
    "interview": "You have been invited to an interview.",
    "accepted": "Congratulations! Your application has been accepted.",
    "rejected": "We regret to inform you that your application has been rejected.",
}


def status_message(status: str) -> str:
    return STATUS_MESSAGES.get(status, f"Your application status has been updated to {status}.")


def room_for(user_id: int) -> str:
    return f"user_{user_id}"


@dataclass(eq=False)
class Subscription:
    room: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)


class NotificationHub:
    """In-process pub/sub keyed by ``user_<id>`` rooms.

    Publishing is thread-safe: sync route handlers run in a worker thread while
    subscribers wait on their own event loop.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, set[Subscription]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, user_id: int) -> Subscription:
        subscription = Subscription(room=room_for(user_id), loop=asyncio.get_running_loop())
        with self._lock:
            self._rooms[subscription.room].add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            members = self._rooms.get(subscription.room)
            if members is None:
                return
            members.discard(subscription)
            if not members:
                del self._rooms[subscription.room]

    def subscriber_count(self, user_id: int) -> int:
        with self._lock:
            return len(self._rooms.get(room_for(user_id), ()))

    def publish(self, user_id: int, payload: dict[str, Any]) -> int:
        with self._lock:
            members = list(self._rooms.get(room_for(user_id), ()))
        delivered = 0
        for subscription in members:
            try:
                subscription.loop.call_soon_threadsafe(subscription.queue.put_nowait, payload)
            except RuntimeError:
                logger.debug("Dropping subscriber on closed loop in %s", subscription.room)
                self.unsubscribe(subscription)
                continue
            delivered += 1
        return delivered


class NotificationService:
    def __init__(self, hub: NotificationHub | None = None) -> None:
        self.hub = hub or NotificationHub()

    def list(self, db: Session, user_id: int) -> list[Notification]:
        return (
            db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .all()
        )

    def record(self, db: Session, user_id: int, message: str, is_read: bool = False) -> Notification:
        """Stage a notification row inside the caller's transaction."""
        notification = Notification(user_id=user_id, message=message, is_read=is_read)
        db.add(notification)
        db.flush()
        return notification

    def push(self, notification: Notification) -> int:
        payload = {
            "event": "newNotification",
            "notification": NotificationOut.model_validate(notification).model_dump(mode="json"),
        }
        delivered = self.hub.publish(notification.user_id, payload)
        if delivered:
            logger.info("Pushed notification %s to %d subscriber(s)", notification.id, delivered)
        return delivered

    def notify(self, db: Session, user_id: int, message: str, is_read: bool = False) -> Notification:
        notification = self.record(db, user_id, message, is_read=is_read)
        db.commit()
        db.refresh(notification)
        self.push(notification)
        return notification

    def subscribe(self, user_id: int) -> Subscription:
        return self.hub.subscribe(user_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        self.hub.unsubscribe(subscription)


notification_service = NotificationService()
