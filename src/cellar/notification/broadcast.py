"""Admin broadcast: push a message to many users and file it in their inboxes."""

import json

import structlog
from protean import handle
from protean.fields import List, String, Text
from protean.utils.globals import current_domain

from cellar.domain import cellar
from cellar.notification.channel import PushMessage, push_to_tokens
from cellar.notification.device import tokens_by_user
from cellar.notification.notification import Notification, NotificationType

logger = structlog.get_logger(__name__)


@cellar.command(part_of="Notification")
class SendBroadcast:
    title = String(required=True, max_length=200)
    body = Text(required=True)
    data = Text()  # JSON object
    user_ids = List(content_type=String)  # empty means every user with a device
    type = String(choices=NotificationType)


@cellar.command_handler(part_of=Notification)
class BroadcastHandler:
    @handle(SendBroadcast)
    def send_broadcast(self, command):
        data = json.loads(command.data) if command.data else {}
        tokens = tokens_by_user(command.user_ids or None)

        reports = push_to_tokens(
            [token for user_tokens in tokens.values() for token in user_tokens],
            PushMessage(title=command.title, body=command.body, data={k: str(v) for k, v in data.items()}),
        )

        recipients = list(command.user_ids) if command.user_ids else list(tokens)
        repo = current_domain.repository_for(Notification)
        for user_id in recipients:
            repo.add(
                Notification.create(
                    user_id=user_id,
                    title=command.title,
                    message=command.body,
                    type=command.type or NotificationType.BROADCAST.value,
                    data=data,
                )
            )

        logger.info("Broadcast sent", recipients=len(recipients), batches=len(reports))
        return {
            "recipients": len(recipients),
            "batches": len(reports),
            "delivered": sum(r.success_count for r in reports),
            "failed": sum(r.failure_count for r in reports),
        }
