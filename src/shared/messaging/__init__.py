"""Messaging fabric registry: pluggable adapter behind MessagingPort.

Uses the in-memory partitioned log by default. A broker-backed adapter can
be selected via the MESSAGING_ADAPTER environment variable.
"""

import os

from shared.messaging.port import MessagingPort

_fabric_instance: MessagingPort | None = None


def get_fabric() -> MessagingPort:
    """Return the configured messaging fabric adapter (singleton)."""
    global _fabric_instance
    if _fabric_instance is None:
        adapter = os.environ.get("MESSAGING_ADAPTER", "memory")
        if adapter == "memory":
            from shared.messaging.memory import InMemoryLog

            partitions = int(os.environ.get("MESSAGING_PARTITIONS", "3"))
            _fabric_instance = InMemoryLog(default_partitions=partitions)
        else:
            raise ValueError(f"Unknown messaging adapter: {adapter}")
    return _fabric_instance


def reset_fabric():
    """Reset the fabric singleton (useful for testing)."""
    global _fabric_instance
    _fabric_instance = None
