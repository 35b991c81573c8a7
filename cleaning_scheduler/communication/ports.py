from abc import ABC, abstractmethod


class Notifier(ABC):
    """
    Port: how we push text messages to cleaning staff.

    The business logic depends ONLY on this interface.
    It doesn't know or care whether messages go via LINE,
    the console, or anything else.

    Fire-and-forget: a failed send raises, the caller logs it,
    nobody retries.
    """

    @abstractmethod
    async def send(self, recipient_id: str, text: str) -> None:
        """Push *text* to the user identified by *recipient_id*."""
        ...
