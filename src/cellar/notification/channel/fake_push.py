"""In-memory push channel that records each batch for test assertions."""

from cellar.notification.channel.port import DeliveryReport, PushChannel, PushMessage


class FakePushChannel(PushChannel):
    def __init__(self) -> None:
        self.batches: list[dict] = []
        self.failing_tokens: set[str] = set()

    def configure(self, failing_tokens=()) -> None:
        self.failing_tokens = set(failing_tokens)

    def send_to_tokens(self, tokens: list[str], message: PushMessage) -> DeliveryReport:
        self.batches.append({"tokens": list(tokens), "title": message.title, "body": message.body, "data": message.data})
        failed = tuple(t for t in tokens if t in self.failing_tokens)
        return DeliveryReport(
            success_count=len(tokens) - len(failed),
            failure_count=len(failed),
            failed_tokens=failed,
        )

    @property
    def sent_tokens(self) -> list[str]:
        return [token for batch in self.batches for token in batch["tokens"] if token not in self.failing_tokens]

    def reset(self) -> None:
        self.batches.clear()
        self.failing_tokens.clear()
