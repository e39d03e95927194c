"""Push notification dispatch."""

from typing import Any

import httpx

from capsync import __version__
from capsync.errors import NotificationSendFailed
from capsync.interfaces import PushDeliveryService
from capsync.logging import log_notification_failed, log_notification_sent, notify_logger


class ExpoPushService:
    """Push delivery through the Expo push API.

    Uses a reusable httpx.AsyncClient. Any transport error, non-2xx status or
    error ticket is raised as NotificationSendFailed; nothing is retried.
    """

    def __init__(
        self,
        url: str,
        title: str,
        body: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the delivery client.

        Args:
            url: Expo push endpoint
            title: Notification title
            body: Notification body text
            timeout: Request timeout in seconds
            client: Optional preconfigured client (tests inject a mock transport)
        """
        self.url = url
        self.title = title
        self.body = body
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={
                "User-Agent": f"capsync/{__version__}",
                "Accept": "application/json",
            },
        )

    def build_message(self, token: str, payload: dict[str, Any]) -> dict[str, Any]:
        return {
            "to": token,
            "sound": "default",
            "title": self.title,
            "body": self.body,
            "data": payload,
        }

    async def send(self, token: str, payload: dict[str, Any]) -> None:
        try:
            response = await self._client.post(self.url, json=self.build_message(token, payload))
        except httpx.TimeoutException as e:
            raise NotificationSendFailed(f"Timeout: {e}") from e
        except httpx.HTTPError as e:
            raise NotificationSendFailed(f"HTTP error: {e}") from e

        if response.status_code >= 400:
            raise NotificationSendFailed(
                f"Push service error: {response.status_code} - {response.text}"
            )

        try:
            body = response.json()
        except ValueError:
            return
        if not isinstance(body, dict):
            return

        ticket = body.get("data")
        # A single message yields a single ticket, some servers wrap it in a list
        if isinstance(ticket, list):
            ticket = ticket[0] if ticket else None
        if isinstance(ticket, dict) and ticket.get("status") == "error":
            raise NotificationSendFailed(ticket.get("message") or "error ticket")

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


class PushSender:
    """Best-effort notification sender. Failures are logged, never raised."""

    def __init__(self, service: PushDeliveryService) -> None:
        self._service = service
        self._log = notify_logger()

    async def send_notification(self, token: str, payload: dict[str, Any]) -> bool:
        """Dispatch ``payload`` to ``token``.

        Returns:
            True if the delivery service accepted the message
        """
        try:
            await self._service.send(token, payload)
        except NotificationSendFailed as e:
            log_notification_failed(self._log, token, e.reason)
            return False
        except Exception as e:
            log_notification_failed(self._log, token, str(e))
            return False

        log_notification_sent(self._log, token)
        return True

    async def close(self) -> None:
        close = getattr(self._service, "close", None)
        if close is not None:
            await close()
