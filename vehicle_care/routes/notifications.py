"""Notification inbox routes and the owner real-time channel."""

import logging
from typing import List

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from vehicle_care.db.models import User
from vehicle_care.db.session import get_db
from vehicle_care.routes.deps import get_current_user
from vehicle_care.schemas.common import APIResponse
from vehicle_care.schemas.notification import NotificationResponse
from vehicle_care.services.notification_service import (
    delete_notification,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
)
from vehicle_care.services.realtime import manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])
ws_router = APIRouter(tags=["realtime"])


def _listing(notifications) -> APIResponse[List[NotificationResponse]]:
    return APIResponse(
        success=True,
        count=len(notifications),
        data=[NotificationResponse.model_validate(item) for item in notifications],
    )


@router.get("/", response_model=APIResponse[List[NotificationResponse]])
def api_list_notifications(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _listing(list_notifications(db=db, owner_id=user.id))


@router.get("/unread", response_model=APIResponse[List[NotificationResponse]])
def api_list_unread(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return _listing(list_notifications(db=db, owner_id=user.id, unread_only=True))


# Declared before /{notification_id}/read so "read-all" is not parsed as an id.
@router.put("/read-all", response_model=APIResponse[None])
def api_mark_all_read(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    updated = mark_all_as_read(db=db, owner_id=user.id)
    return APIResponse(success=True, count=updated, message="All notifications marked as read")


@router.put("/{notification_id}/read", response_model=APIResponse[NotificationResponse])
def api_mark_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = mark_as_read(db=db, owner_id=user.id, notification_id=notification_id)
    return APIResponse(success=True, data=NotificationResponse.model_validate(notification))


@router.delete("/{notification_id}", response_model=APIResponse[None])
def api_delete_notification(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    delete_notification(db=db, owner_id=user.id, notification_id=notification_id)
    return APIResponse(success=True, message="Notification deleted")


@ws_router.websocket("/ws/notifications/{owner_id}")
async def notifications_websocket(websocket: WebSocket, owner_id: int):
    """Owner session channel; receives ``new-notification`` and ``service-due`` events.

    Messages from the client are ignored except as keep-alives.
    """
    await manager.connect(owner_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(owner_id, websocket)
