import asyncio
import logging
from typing import Callable

import config
from enums.notification_level import NotificationLevel

logger = logging.getLogger(__name__)

NotificationListener = Callable[[str, NotificationLevel], None]

# most recent toasts kept in NotificationService.history
HISTORY_LIMIT = 50


class NotificationService:
    """
    Transient user notifications (the toast channel).

    push() delivers a message to every listener and, when an event loop is
    running, schedules on_dismiss after dismiss_seconds. A newer message
    replaces the pending dismissal of an older one.
    """

    def __init__(self, dismiss_seconds: float | None = None, history_limit: int = HISTORY_LIMIT):
        self.dismiss_seconds = dismiss_seconds if dismiss_seconds is not None else config.NOTIFICATION_DISMISS_SECONDS
        self._listeners: list[NotificationListener] = []
        self._dismiss_listeners: list[Callable[[], None]] = []
        self._dismiss_handle: asyncio.TimerHandle | None = None
        self.history: list[tuple[NotificationLevel, str]] = []
        self.history_limit = history_limit

    def subscribe(self, listener: NotificationListener,
                  on_dismiss: Callable[[], None] | None = None) -> Callable[[], None]:
        self._listeners.append(listener)
        if on_dismiss is not None:
            self._dismiss_listeners.append(on_dismiss)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
            if on_dismiss is not None and on_dismiss in self._dismiss_listeners:
                self._dismiss_listeners.remove(on_dismiss)

        return unsubscribe

    def push(self, message: str, level: NotificationLevel = NotificationLevel.INFO) -> None:
        log = logger.warning if level == NotificationLevel.ERROR else logger.info
        log(f"[Notification] {level.value}: {message}")
        self.history.append((level, message))
        del self.history[:-self.history_limit]
        for listener in list(self._listeners):
            listener(message, level)
        self._schedule_dismiss()

    def dismiss(self) -> None:
        self._cancel_dismiss()
        for on_dismiss in list(self._dismiss_listeners):
            on_dismiss()

    def _schedule_dismiss(self) -> None:
        self._cancel_dismiss()
        if not self.dismiss_seconds or self.dismiss_seconds <= 0:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._dismiss_handle = loop.call_later(self.dismiss_seconds, self.dismiss)

    def _cancel_dismiss(self) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None
