from abc import ABC, abstractmethod

import httpx

from docvault.server.exceptions import NotificationError


class BaseNotifier(ABC):
    """Contract for administrative notifications."""

    @abstractmethod
    def notify(self, subject: str, body: str) -> None:
        """Deliver a notification.

        Raises:
            NotificationError: if delivery fails.
        """


class WebhookEmailNotifier(BaseNotifier):
    """Sends an email to the admin address through an HTTP mail webhook."""

    def __init__(
        self,
        *,
        url: str,
        recipient: str,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url
        self._recipient = recipient
        self._timeout = timeout_seconds
        self._transport = transport

    def notify(self, subject: str, body: str) -> None:
        payload = {"to": self._recipient, "subject": subject, "text": body}
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                client.post(self._url, json=payload).raise_for_status()
        except httpx.HTTPError as exc:
            raise NotificationError(f"Admin notification to {self._recipient} failed: {exc}") from exc
