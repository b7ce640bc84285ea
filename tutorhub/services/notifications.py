"""Notification dispatch.

Delivery itself is handled outside this service; the core only hands a
message for a group to whatever :class:`Notifier` is wired in.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, group_id: int, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: records the message in the application log."""

    def notify(self, group_id: int, message: str) -> None:
        logger.info("notify group=%s: %s", group_id, message)


def dispatch(notifier: Notifier, group_id: int, message: str) -> None:
    """Fire and forget. A failing notifier never fails the caller's write."""
    try:
        notifier.notify(group_id, message)
    except Exception:
        logger.exception("Notification for group %s failed", group_id)
