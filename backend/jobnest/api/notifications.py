from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, status
from sqlalchemy.orm import Session

from jobnest.auth import decode_access_token, get_current_user
from jobnest.database import get_db
from jobnest.models.notification import Notification
from jobnest.models.user import User
from jobnest.schemas.notification import NotificationCreate, NotificationOut, NotificationTarget
from jobnest.services.notifications import notification_service


logger = logging.getLogger(__name__)

router = APIRouter()


def _owned_notification(db: Session, notification_id: int, user_id: int) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise HTTPException(
            status_code=404,
            detail="Notification not found or you don't have permission to change it.",
        )
    return notification


@router.post("/create", status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    if not db.query(User).filter(User.id == payload.user_id).first():
        raise HTTPException(status_code=404, detail="User not found.")
    notification = notification_service.notify(db, payload.user_id, payload.message, is_read=payload.is_read)
    return {"message": "Notification created successfully", "notification": NotificationOut.model_validate(notification)}


@router.get("/user")
def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    notifications = notification_service.list(db, current_user.id)
    return {
        "count": len(notifications),
        "unread": sum(1 for item in notifications if not item.is_read),
        "notifications": [NotificationOut.model_validate(item) for item in notifications],
    }


@router.put("/read")
def mark_notification_read(
    payload: NotificationTarget,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    notification = _owned_notification(db, payload.notification_id, current_user.id)
    notification.is_read = True
    db.add(notification)
    db.commit()
    db.refresh(notification)
    return {
        "message": "Notification marked as read successfully",
        "notification": NotificationOut.model_validate(notification),
    }


@router.put("/read-all")
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    return {"message": "All notifications marked as read successfully", "updated": int(updated)}


@router.delete("/delete")
def delete_notification(
    payload: NotificationTarget,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    notification = _owned_notification(db, payload.notification_id, current_user.id)
    db.delete(notification)
    db.commit()
    return {"message": "Notification deleted successfully"}


@router.websocket("/ws")
async def notification_stream(websocket: WebSocket, token: str | None = None) -> None:
    claims = decode_access_token(token or "")
    if claims is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    subscription = notification_service.subscribe(claims["id"])
    await websocket.accept()
    logger.info("User %s joined %s", claims["id"], subscription.room)

    async def forward() -> None:
        while True:
            payload = await subscription.queue.get()
            await websocket.send_json(payload)

    sender = asyncio.create_task(forward())
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sender
        notification_service.unsubscribe(subscription)
        logger.info("User %s left %s", claims["id"], subscription.room)
