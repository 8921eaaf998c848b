"""Notification aggregate: one message in a user's in-app inbox."""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Identifier, String, Text

from cellar.domain import cellar


class NotificationType(Enum):
    ORDER = "order"
    PROMOTION = "promotion"
    CART_REMINDER = "cart_reminder"
    BROADCAST = "broadcast"
    SYSTEM = "system"


@cellar.aggregate
class Notification:
    user_id = Identifier(required=True)
    type = String(choices=NotificationType, default=NotificationType.SYSTEM.value)
    title = String(required=True, max_length=200)
    message = Text(required=True)
    data = Text()  # JSON object
    is_read = Boolean(default=False)
    created_at = DateTime()
    read_at = DateTime()

    @classmethod
    def create(cls, user_id, title, message, type=None, data=None):
        return cls(
            user_id=user_id,
            type=type or NotificationType.SYSTEM.value,
            title=title,
            message=message,
            data=json.dumps(data) if data else None,
            is_read=False,
            created_at=datetime.now(UTC),
        )

    @property
    def payload(self) -> dict:
        return json.loads(self.data) if self.data else {}

    def mark_read(self):
        if not self.is_read:
            self.is_read = True
            self.read_at = datetime.now(UTC)
