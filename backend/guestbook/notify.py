"""Best-effort moderation notifications.

Deliveries run as background tasks. A failed delivery is logged and
dropped; it never affects the request that triggered it.
"""

import asyncio
import logging
from typing import Optional, Protocol, Set

import httpx

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send(self, text: str) -> None:
        ...


class WebhookNotifier:
    """Posts ``{"content": text}`` to a chat-style webhook URL."""

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def send(self, text: str) -> None:
        try:
            response = await self._client.post(self.url, json={"content": text})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("webhook notification failed: %s", exc)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class NotificationDispatcher:
    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier
        self._tasks: Set[asyncio.Task] = set()

    def dispatch(self, text: str) -> None:
        """Schedule delivery of ``text`` and return immediately."""
        if self.notifier is None:
            return
        task = asyncio.get_running_loop().create_task(self._deliver(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _deliver(self, text: str) -> None:
        try:
            await self.notifier.send(text)
        except Exception:  # noqa: BLE001
            logger.exception("notification delivery raised")

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        await self.wait_idle()
        close = getattr(self.notifier, "aclose", None)
        if close is not None:
            await close()
