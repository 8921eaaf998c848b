"""Push channel port: deliver one message to one batch of device tokens."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PushMessage:
    title: str
    body: str
    data: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeliveryReport:
    """Per-batch outcome reported by the push provider."""

    success_count: int
    failure_count: int
    failed_tokens: tuple = ()


class PushChannel(ABC):
    @abstractmethod
    def send_to_tokens(self, tokens: list[str], message: PushMessage) -> DeliveryReport:
        """Send ``message`` to every token in a single provider call."""
        ...
