from .ports import Notifier


class ConsoleNotifier(Notifier):
    """Adapter: print to console and keep a copy of every message. For dev/testing."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self._failing: set[str] = set()

    async def send(self, recipient_id: str, text: str) -> None:
        if recipient_id in self._failing:
            raise ConnectionError(f"simulated delivery failure to {recipient_id}")

        self.sent.append((recipient_id, text))

        print(f"\n{'=' * 60}")
        print(f"  TO: {recipient_id}")
        print(f"{'=' * 60}")
        print(text)
        print(f"{'=' * 60}\n")

    def fail_for(self, recipient_id: str) -> None:
        """Call from tests to make deliveries to *recipient_id* fail."""
        self._failing.add(recipient_id)
