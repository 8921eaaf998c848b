"""In-memory broadcaster that records emitted events for test assertions."""

from cellar.broadcast.port import Broadcaster


class FakeBroadcaster(Broadcaster):
    def __init__(self) -> None:
        self.emitted: list[dict] = []
        self.should_fail: bool = False

    def configure(self, should_fail: bool = False) -> None:
        self.should_fail = should_fail

    def emit(self, event_name: str, payload: dict) -> None:
        if self.should_fail:
            raise ConnectionError("Broadcast channel unavailable")
        self.emitted.append({"event": event_name, "payload": payload})

    def events_named(self, event_name: str) -> list[dict]:
        return [e["payload"] for e in self.emitted if e["event"] == event_name]

    def reset(self) -> None:
        self.emitted.clear()
        self.should_fail = False
