import os

from .ports import Notifier


def create_notifier(channel: str | None = None) -> Notifier:
    """
    Factory: create the right adapter based on config.

    The channel can be passed explicitly or read from the
    NOTIFICATION_CHANNEL env var. Defaults to "console".
    """
    channel = channel or os.environ.get("NOTIFICATION_CHANNEL", "console")

    if channel == "line":
        from .line_notifier import LineNotifier

        return LineNotifier(channel_access_token=os.environ["LINE_CHANNEL_ACCESS_TOKEN"])

    if channel == "console":
        from .console_notifier import ConsoleNotifier

        return ConsoleNotifier()

    raise ValueError(f"Unknown notification channel: {channel!r}")
