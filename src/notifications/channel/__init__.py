"""Sender registry: the pluggable channel notifications are delivered through.

``NOTIFICATION_SENDER`` selects the adapter: ``log`` (default) or ``fake``.
"""

import os

_sender_instance = None


def get_sender():
    """Return the configured notification sender (singleton)."""
    global _sender_instance
    if _sender_instance is None:
        adapter = os.environ.get("NOTIFICATION_SENDER", "log")
        if adapter == "log":
            from notifications.channel.log_sender import LogSender

            _sender_instance = LogSender()
        elif adapter == "fake":
            from notifications.channel.fake_sender import FakeSender

            _sender_instance = FakeSender()
        else:
            raise ValueError(f"Unknown notification sender: {adapter}")
    return _sender_instance


def set_sender(sender):
    global _sender_instance
    _sender_instance = sender


def reset_sender():
    """Reset the sender singleton (useful for testing)."""
    global _sender_instance
    _sender_instance = None
