"""Real-time broadcaster port: fan an event out to every connected listener."""

from abc import ABC, abstractmethod


class Broadcaster(ABC):
    @abstractmethod
    def emit(self, event_name: str, payload: dict) -> None:
        """Deliver ``payload`` under ``event_name``. No acknowledgement, no replay."""
        ...
