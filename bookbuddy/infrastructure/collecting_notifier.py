"""Notifier that logs toasts and keeps them until they are drained."""

import logging
from typing import List

from ..domain.entities.onboarding import Toast
from ..domain.interfaces.notifier import Notifier

logger = logging.getLogger(__name__)


class CollectingNotifier(Notifier):
    """Collects toasts so the API layer can return them with its response."""

    def __init__(self):
        self._pending: List[Toast] = []

    def notify(self, toast: Toast) -> None:
        log = logger.warning if toast.variant == "destructive" else logger.info
        log(f"{toast.title}: {toast.description}")
        self._pending.append(toast)

    @property
    def pending(self) -> list[Toast]:
        return list(self._pending)

    def drain(self) -> list[Toast]:
        """Return the pending toasts and forget them."""
        toasts, self._pending = self._pending, []
        return toasts
