"""Notification routes: inbox, device tokens, broadcasts and reminder sweeps."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from cellar.api.deps import admin_user_id, current_user_id
from cellar.api.responses import ok, serialize
from cellar.api.schemas import (
    BroadcastRequest,
    DeviceTokenRequest,
    NotificationRequest,
    ProcessRemindersRequest,
)
from cellar.notification.broadcast import SendBroadcast
from cellar.notification.device import RegisterDeviceToken, UnregisterDeviceToken
from cellar.notification.inbox import CreateNotification, MarkNotificationRead, notifications_of
from cellar.notification.notification import Notification
from cellar.notification.reminder import ProcessDueReminders
from cellar.shared.lookup import load

notification_router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_body(notification) -> dict:
    return serialize(notification, data=notification.payload)


@notification_router.get("")
async def get_notifications(unread: bool = False, user_id: str = Depends(current_user_id)) -> dict:
    notifications = notifications_of(user_id, unread_only=unread)
    unread_count = sum(1 for n in notifications if not n.is_read)
    return ok([_notification_body(n) for n in notifications], unread_count=unread_count)


@notification_router.post("", status_code=201)
async def create_notification(body: NotificationRequest, user_id: str = Depends(current_user_id)) -> dict:
    command = CreateNotification(
        user_id=user_id,
        title=body.title,
        message=body.message,
        type=body.type,
        data=json.dumps(body.data) if body.data else None,
    )
    notification_id = current_domain.process(command, asynchronous=False)
    return ok(_notification_body(load(Notification, notification_id)))


@notification_router.put("/{notification_id}/read")
async def mark_read(notification_id: str, user_id: str = Depends(current_user_id)) -> dict:
    command = MarkNotificationRead(user_id=user_id, notification_id=notification_id)
    current_domain.process(command, asynchronous=False)
    return ok(_notification_body(load(Notification, notification_id)))


@notification_router.post("/devices", status_code=201)
async def register_device(body: DeviceTokenRequest, user_id: str = Depends(current_user_id)) -> dict:
    device_id = current_domain.process(RegisterDeviceToken(user_id=user_id, token=body.token), asynchronous=False)
    return ok({"id": device_id, "token": body.token})


@notification_router.delete("/devices")
async def unregister_device(body: DeviceTokenRequest, user_id: str = Depends(current_user_id)) -> dict:
    current_domain.process(UnregisterDeviceToken(user_id=user_id, token=body.token), asynchronous=False)
    return ok(message="Device token removed")


@notification_router.post("/broadcast")
async def broadcast(body: BroadcastRequest, _admin: str = Depends(admin_user_id)) -> dict:
    command = SendBroadcast(
        title=body.title,
        body=body.body,
        data=json.dumps(body.data) if body.data else None,
        user_ids=body.user_ids,
    )
    return ok(current_domain.process(command, asynchronous=False))


@notification_router.post("/reminders/process")
async def process_reminders(body: ProcessRemindersRequest, _admin: str = Depends(admin_user_id)) -> dict:
    sent = current_domain.process(ProcessDueReminders(as_of=body.as_of), asynchronous=False)
    return ok({"sent": sent})
