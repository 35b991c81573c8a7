import logging

import requests

from .ports import Notifier

log = logging.getLogger(__name__)

PUSH_URL = "https://api.line.me/v2/bot/message/push"


class LineNotifier(Notifier):
    """Adapter: LINE Messaging API push messages."""

    def __init__(self, channel_access_token: str, timeout: float = 10):
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {channel_access_token}",
                "Content-Type": "application/json",
            }
        )

    async def send(self, recipient_id: str, text: str) -> None:
        resp = self.session.post(
            PUSH_URL,
            json={"to": recipient_id, "messages": [{"type": "text", "text": text}]},
            timeout=self.timeout,
        )
        if not resp.ok:
            log.error("LINE API error %d: %s", resp.status_code, resp.text[:200])
        resp.raise_for_status()
