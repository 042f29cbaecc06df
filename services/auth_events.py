import asyncio
import inspect
import logging
from collections import defaultdict
from typing import Any, Callable

from enums.auth_event import AuthEvent

logger = logging.getLogger(__name__)

AuthEventHandler = Callable[..., Any]


class AuthEventBus:
    """
    Explicit observer registry for authentication signals.

    publish() runs every handler synchronously in registration order before it
    returns, so a logout clears session and cart state before the caller can
    issue another remote call. Coroutine handlers are scheduled on the running
    loop by publish(), and awaited in order by emit().
    """

    def __init__(self):
        self._handlers: dict[AuthEvent, list[AuthEventHandler]] = defaultdict(list)
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, event: AuthEvent, handler: AuthEventHandler) -> Callable[[], None]:
        """
        Register a handler.

        Returns:
            Callable that removes the registration (safe to call twice)
        """
        self._handlers[event].append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers[event]:
                self._handlers[event].remove(handler)

        return unsubscribe

    def publish(self, event: AuthEvent, **payload) -> None:
        logger.debug(f"[AuthEvents] {event.value} {sorted(payload)}")
        for handler in list(self._handlers[event]):
            result = self._invoke(event, handler, payload)
            if inspect.isawaitable(result):
                self._schedule(event, result)

    async def emit(self, event: AuthEvent, **payload) -> None:
        logger.debug(f"[AuthEvents] {event.value} {sorted(payload)}")
        for handler in list(self._handlers[event]):
            result = self._invoke(event, handler, payload)
            if inspect.isawaitable(result):
                try:
                    await result
                except Exception as e:
                    logger.error(f"[AuthEvents] Handler {handler!r} failed on {event.value}: {e}", exc_info=True)

    def handler_count(self, event: AuthEvent) -> int:
        return len(self._handlers[event])

    @staticmethod
    def _invoke(event: AuthEvent, handler: AuthEventHandler, payload: dict):
        # one failing observer must not keep the others from seeing the signal
        try:
            return handler(**payload)
        except Exception as e:
            logger.error(f"[AuthEvents] Handler {handler!r} failed on {event.value}: {e}", exc_info=True)
            return None

    def _schedule(self, event: AuthEvent, awaitable) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"[AuthEvents] No running loop, dropping async handler for {event.value}")
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            return
        task = loop.create_task(awaitable)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for async handlers scheduled by publish()."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
