"""Inbox commands and queries."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from cellar.domain import cellar
from cellar.errors import NotFoundError
from cellar.notification.notification import Notification, NotificationType
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all, load


@cellar.command(part_of="Notification")
class CreateNotification:
    user_id = Identifier(required=True)
    title = String(required=True, max_length=200)
    message = Text(required=True)
    type = String(choices=NotificationType)
    data = Text()  # JSON object


@cellar.command(part_of="Notification")
class MarkNotificationRead:
    user_id = Identifier(required=True)
    notification_id = Identifier(required=True)


@cellar.command_handler(part_of=Notification)
class InboxHandler:
    @handle(CreateNotification)
    def create_notification(self, command):
        notification = Notification.create(
            user_id=command.user_id,
            title=command.title,
            message=command.message,
            type=command.type,
            data=json.loads(command.data) if command.data else None,
        )
        current_domain.repository_for(Notification).add(notification)
        return str(notification.id)

    @handle(MarkNotificationRead)
    def mark_read(self, command):
        notification = load(Notification, command.notification_id)
        if str(notification.user_id) != str(command.user_id):
            raise NotFoundError("Notification not found", {"notification_id": str(command.notification_id)})
        notification.mark_read()
        current_domain.repository_for(Notification).add(notification)


def notifications_of(user_id, unread_only=False) -> list:
    notifications = find_all(Notification, user_id=str(user_id))
    if unread_only:
        notifications = [n for n in notifications if not n.is_read]
    return sorted(notifications, key=lambda n: ensure_utc(n.created_at), reverse=True)
