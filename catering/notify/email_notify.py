import logging
from dataclasses import dataclass
from typing import Iterable, List

import requests

from catering import config

logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    to: List[str]
    subject: str
    html: str
    trigger: str = ""


class EmailNotifier:
    def __init__(self, api_key: str, sender: str, api_url: str = config.RESEND_API_URL):
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def send(self, message: EmailMessage) -> bool:
        """Send one email through the provider. Raises on HTTP errors."""
        if not self.configured:
            logger.info("Email not configured - skipping %s to %s", message.trigger, message.to)
            return False
        resp = requests.post(
            self.api_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "from": self.sender,
                "to": message.to,
                "subject": message.subject,
                "html": message.html,
            },
            timeout=15,
        )
        resp.raise_for_status()
        logger.info("Email %s sent to %s", message.trigger or message.subject, ", ".join(message.to))
        return True

    def deliver(self, messages: Iterable[EmailMessage]) -> int:
        """Fire-and-forget batch: failures are logged, never raised."""
        sent = 0
        for message in messages:
            try:
                if self.send(message):
                    sent += 1
            except Exception:
                logger.exception("Failed to send %s email to %s", message.trigger, message.to)
        return sent


# global instance
notifier = EmailNotifier(
    api_key=config.RESEND_API_KEY,
    sender=config.RESEND_FROM_EMAIL,
)
