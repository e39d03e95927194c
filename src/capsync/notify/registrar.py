"""Device push registration and foreground notification listeners."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

from capsync.interfaces import ForegroundHandler, PushRegistrationProvider
from capsync.logging import log_push_registered, log_push_unavailable, notify_logger


class ForegroundListener:
    """Holds the first foreground notification received while acquired."""

    def __init__(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._event: asyncio.Future = self._loop.create_future()

    def deliver(self, event: dict[str, Any]) -> None:
        """Provider callback; safe to call from any thread."""
        self._loop.call_soon_threadsafe(self._set, event)

    def _set(self, event: dict[str, Any]) -> None:
        if not self._event.done():
            self._event.set_result(event)

    @property
    def received(self) -> dict[str, Any] | None:
        if self._event.done():
            return self._event.result()
        return None

    async def wait(self, timeout: float) -> dict[str, Any] | None:
        """Wait up to ``timeout`` seconds for the first event."""
        try:
            return await asyncio.wait_for(asyncio.shield(self._event), timeout)
        except asyncio.TimeoutError:
            return None


class NotificationRegistrar:
    """Obtains and caches the device push token.

    Registration happens once per process: concurrent and repeated calls to
    ``register`` share a single provider call, and a missing token is cached
    as well. Every foreground subscription hands back a disposer that must be
    called by the flow that created it; ``foreground_listener`` does that
    automatically.
    """

    def __init__(self, provider: PushRegistrationProvider) -> None:
        self._provider = provider
        self._token: str | None = None
        self._registered = False
        self._lock = asyncio.Lock()
        self._active_subscriptions = 0
        self._log = notify_logger()

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def registered(self) -> bool:
        return self._registered

    @property
    def active_subscriptions(self) -> int:
        """Number of foreground subscriptions not yet disposed."""
        return self._active_subscriptions

    async def register(self) -> str | None:
        """Register for push notifications and cache the token.

        Returns:
            The device token, or None when the platform gives none
            (simulator, denied notification permission, provider error)
        """
        async with self._lock:
            if self._registered:
                return self._token

            reason = None
            try:
                token = await self._provider.get_device_token()
            except Exception as e:
                self._log.warning("Push registration failed: %s", e)
                token = None
                reason = str(e)

            self._token = token or None
            self._registered = True

            if self._token:
                log_push_registered(self._log, self._token)
            else:
                log_push_unavailable(self._log, reason)
            return self._token

    def subscribe_foreground(self, handler: ForegroundHandler) -> Callable[[], None]:
        """Listen for notifications received while the app is active.

        Returns:
            Idempotent function that removes the listener
        """
        remove = self._provider.add_listener(handler)
        self._active_subscriptions += 1
        disposed = False

        def unsubscribe() -> None:
            nonlocal disposed
            if disposed:
                return
            disposed = True
            try:
                remove()
            finally:
                self._active_subscriptions -= 1
                self._log.debug("Foreground listener removed")

        return unsubscribe

    def listen_once(self, handler: ForegroundHandler) -> Callable[[], None]:
        """Deliver only the first foreground event, then unsubscribe."""
        fired = False
        unsubscribe: Callable[[], None] = lambda: None

        def once(event: dict[str, Any]) -> None:
            nonlocal fired
            if fired:
                return
            fired = True
            try:
                handler(event)
            finally:
                unsubscribe()

        unsubscribe = self.subscribe_foreground(once)
        return unsubscribe

    @asynccontextmanager
    async def foreground_listener(self) -> AsyncIterator[ForegroundListener]:
        """Acquire a listener for the duration of the block.

        The subscription is released on exit whatever happens inside.
        """
        listener = ForegroundListener()
        unsubscribe = self.subscribe_foreground(listener.deliver)
        try:
            yield listener
        finally:
            unsubscribe()
