"""
Toast notifications raised by the form and the persistence gateway.
"""

import logging

from .models import Toast, ToastVariant

logger = logging.getLogger(__name__)


class Notifier:
    """Collects toasts until the surface that displays them drains the queue."""

    def __init__(self) -> None:
        self._pending: list[Toast] = []

    def notify(
        self,
        title: str,
        description: str,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        logger.debug("Toast raised: %s - %s", title, description)
        self._pending.append(toast)
        return toast

    def drain(self) -> list[Toast]:
        """Return and forget every pending toast, oldest first."""
        pending, self._pending = self._pending, []
        return pending
