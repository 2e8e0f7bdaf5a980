"""Notification surface protocol."""

from typing import Protocol, runtime_checkable

from ..entities.onboarding import Toast


@runtime_checkable
class Notifier(Protocol):
    """Surface used to present rejection reasons and confirmations to the user."""

    def notify(self, toast: Toast) -> None:
        ...
