"""Sender port: abstract interface for delivering a notification to a user."""

from abc import ABC, abstractmethod


class NotificationSender(ABC):
    @abstractmethod
    def send(self, notification) -> dict:
        """Deliver one Notification.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
