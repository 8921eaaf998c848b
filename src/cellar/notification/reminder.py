"""Cart-abandonment reminders.

A ``CartReminder`` is a scheduled task keyed by user, cart and due time.
Every cart change cancels the cart's pending reminder and schedules a fresh
one, so a cart never has more than one pending reminder. Clearing the cart,
which also happens at checkout, cancels without rescheduling.
``ProcessDueReminders`` is meant to be triggered by an external scheduler.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

import structlog
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from cellar.cart.events import CartCleared, CartUpdated
from cellar.config import setting
from cellar.domain import cellar
from cellar.notification.channel import PushMessage, push_to_tokens
from cellar.notification.device import tokens_by_user
from cellar.notification.notification import Notification, NotificationType
from cellar.shared.clock import ensure_utc
from cellar.shared.lookup import find_all

logger = structlog.get_logger(__name__)

REMINDER_TITLE = "Cart Abandonment"
REMINDER_BODY = "Items are still in your cart! Complete your purchase before they're gone!"


class ReminderStatus(Enum):
    PENDING = "pending"
    CANCELLED = "cancelled"
    SENT = "sent"


@cellar.aggregate
class CartReminder:
    user_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    scheduled_at = DateTime(required=True)
    status = String(choices=ReminderStatus, default=ReminderStatus.PENDING.value)
    sent_at = DateTime()

    @classmethod
    def schedule(cls, user_id, cart_id, scheduled_at):
        return cls(user_id=user_id, cart_id=cart_id, scheduled_at=scheduled_at, status=ReminderStatus.PENDING.value)

    def is_due(self, as_of):
        return self.status == ReminderStatus.PENDING.value and ensure_utc(self.scheduled_at) <= ensure_utc(as_of)

    def cancel(self):
        self.status = ReminderStatus.CANCELLED.value

    def mark_sent(self, sent_at):
        self.status = ReminderStatus.SENT.value
        self.sent_at = sent_at


def pending_reminders(cart_id=None) -> list:
    filters = {"status": ReminderStatus.PENDING.value}
    if cart_id is not None:
        filters["cart_id"] = str(cart_id)
    return find_all(CartReminder, **filters)


def _cancel_pending(cart_id):
    repo = current_domain.repository_for(CartReminder)
    for reminder in pending_reminders(cart_id):
        reminder.cancel()
        repo.add(reminder)


@cellar.event_handler(part_of=CartReminder, stream_category="cellar::cart")
class CartReminderScheduler:
    @handle(CartUpdated)
    def on_cart_updated(self, event: CartUpdated) -> None:
        _cancel_pending(event.cart_id)
        if not event.item_count:
            return

        due = datetime.now(UTC) + timedelta(minutes=setting("CART_REMINDER_DELAY_MINUTES"))
        reminder = CartReminder.schedule(user_id=event.user_id, cart_id=event.cart_id, scheduled_at=due)
        current_domain.repository_for(CartReminder).add(reminder)
        logger.info("Cart reminder scheduled", cart_id=str(event.cart_id), scheduled_at=due.isoformat())

    @handle(CartCleared)
    def on_cart_cleared(self, event: CartCleared) -> None:
        _cancel_pending(event.cart_id)


@cellar.command(part_of="CartReminder")
class ProcessDueReminders:
    as_of = DateTime()


@cellar.command_handler(part_of=CartReminder)
class ProcessDueRemindersHandler:
    @handle(ProcessDueReminders)
    def process_due(self, command):
        as_of = command.as_of or datetime.now(UTC)
        due = [r for r in pending_reminders() if r.is_due(as_of)]
        if not due:
            return 0

        reminder_repo = current_domain.repository_for(CartReminder)
        inbox_repo = current_domain.repository_for(Notification)
        for reminder in due:
            data = {"cart_id": str(reminder.cart_id)}
            tokens = tokens_by_user([reminder.user_id]).get(str(reminder.user_id), [])
            push_to_tokens(tokens, PushMessage(title=REMINDER_TITLE, body=REMINDER_BODY, data=data))
            inbox_repo.add(
                Notification.create(
                    user_id=reminder.user_id,
                    title=REMINDER_TITLE,
                    message=REMINDER_BODY,
                    type=NotificationType.CART_REMINDER.value,
                    data=data,
                )
            )
            reminder.mark_sent(as_of)
            reminder_repo.add(reminder)

        logger.info("Cart reminders sent", count=len(due))
        return len(due)
