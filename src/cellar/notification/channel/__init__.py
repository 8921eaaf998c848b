"""Push channel registry and batched dispatch.

Uses the in-memory ``FakePushChannel`` unless a provider-backed channel was
installed with ``set_push_channel()``.
"""

import structlog

from cellar.config import setting
from cellar.notification.channel.fake_push import FakePushChannel
from cellar.notification.channel.port import DeliveryReport, PushChannel, PushMessage

__all__ = [
    "DeliveryReport",
    "FakePushChannel",
    "PushChannel",
    "PushMessage",
    "get_push_channel",
    "push_to_tokens",
    "reset_push_channel",
    "set_push_channel",
]

logger = structlog.get_logger(__name__)

_current_channel: PushChannel | None = None


def get_push_channel() -> PushChannel:
    global _current_channel
    if _current_channel is None:
        _current_channel = FakePushChannel()
    return _current_channel


def set_push_channel(channel: PushChannel) -> None:
    global _current_channel
    _current_channel = channel


def reset_push_channel() -> None:
    global _current_channel
    _current_channel = None


def push_to_tokens(tokens, message: PushMessage) -> list[DeliveryReport]:
    """Send to every token in provider-sized batches.

    Failed deliveries are logged and not retried.
    """
    tokens = list(dict.fromkeys(t for t in tokens if t))
    if not tokens:
        logger.warning("Skipping push notification: no device tokens", title=message.title)
        return []

    batch_size = setting("PUSH_BATCH_SIZE")
    channel = get_push_channel()
    reports = []
    for start in range(0, len(tokens), batch_size):
        batch = tokens[start : start + batch_size]
        report = channel.send_to_tokens(batch, message)
        if report.failure_count:
            logger.warning(
                "Push batch had failures",
                title=message.title,
                batch_size=len(batch),
                failure_count=report.failure_count,
            )
        reports.append(report)

    logger.info(
        "Push notification sent",
        title=message.title,
        batches=len(reports),
        delivered=sum(r.success_count for r in reports),
    )
    return reports
