"""Error reporting with optional user-facing notification.

An ``ErrorReporter`` is created per component and logs through structlog.
User notification goes through a ``Notifier`` passed in at construction;
there is no process-wide callback to register or clear.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Protocol, TypeVar

import structlog

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

ErrorLevel = Literal["info", "warn", "error"]


class ErrorMessages:
    LOAD_FAILED = "Loading failed, reload and try again"
    SAVE_FAILED = "Saving failed, please retry"
    UNKNOWN_ERROR = "An unknown error occurred"


class Notifier(Protocol):
    """Delivers a short message to whoever is watching (UI, MCP client, ...)."""

    def notify(self, message: str, level: ErrorLevel) -> None: ...


def format_error(error: object) -> str:
    if isinstance(error, BaseException):
        return str(error) or type(error).__name__
    if isinstance(error, str):
        return error
    return ErrorMessages.UNKNOWN_ERROR


class ErrorReporter:
    """Component-scoped logger that can also notify the user."""

    def __init__(self, component: str, notifier: Notifier | None = None) -> None:
        self.component = component
        self._notifier = notifier
        self._log = structlog.get_logger().bind(component=component)

    def warn(self, message: str, **data: object) -> None:
        self._log.warning(message, **data)

    def error(
        self,
        error: object,
        *,
        action: str | None = None,
        notify: bool = False,
        user_message: str | None = None,
        level: ErrorLevel = "error",
    ) -> None:
        """Log ``error`` and, if asked and a notifier is wired, tell the user."""
        message = format_error(error)
        fields: dict[str, object] = {"action": action, "error": message}
        if isinstance(error, BaseException) and level != "info":
            fields["exc_info"] = error

        emit = {"info": self._log.info, "warn": self._log.warning, "error": self._log.error}[level]
        emit("component_error", **fields)

        if notify and self._notifier is not None:
            try:
                self._notifier.notify(user_message or message, level)
            except Exception:
                self._log.warning("notifier_failed", action=action, exc_info=True)

    async def wrap_async(
        self,
        fn: Callable[[], Awaitable[T]],
        *,
        action: str | None = None,
        notify: bool = False,
        user_message: str | None = None,
        fallback: T | None = None,
    ) -> T | None:
        """Await ``fn()``; on failure report it and return ``fallback``."""
        try:
            return await fn()
        except Exception as exc:
            self.error(exc, action=action, notify=notify, user_message=user_message)
            return fallback
