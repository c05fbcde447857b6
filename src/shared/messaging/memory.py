"""In-memory messaging fabric: a partitioned log for development and tests.

Models the delivery semantics the protocol depends on: key-hashed partition
routing, per-partition ordering, and per-group committed offsets with
redelivery of anything uncommitted. Publish failure is configurable so the
outbox retry path can be exercised.
"""

import threading
import zlib
from datetime import UTC, datetime

from shared.errors import PublishFailure
from shared.messaging.port import MessagingPort, Record

DEFAULT_PARTITIONS = 3


class InMemoryLog(MessagingPort):
    """Thread-safe partitioned log held in process memory."""

    def __init__(self, default_partitions: int = DEFAULT_PARTITIONS):
        self.default_partitions = default_partitions
        self._topics: dict[str, list[list[Record]]] = {}
        self._offsets: dict[tuple[str, str, int], int] = {}
        self._lock = threading.RLock()
        self.should_succeed = True
        self.failure_reason = "Broker unavailable"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Broker unavailable"):
        """Configure publish behaviour for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    # -------------------------------------------------------------------
    # Topics
    # -------------------------------------------------------------------
    def create_topic(self, topic: str, partitions: int | None = None) -> None:
        with self._lock:
            if topic not in self._topics:
                count = partitions or self.default_partitions
                self._topics[topic] = [[] for _ in range(count)]

    def topics(self) -> list[str]:
        with self._lock:
            return sorted(self._topics)

    def partitions(self, topic: str) -> int:
        self.create_topic(topic)
        return len(self._topics[topic])

    def partition_for(self, topic: str, key: str) -> int:
        return zlib.crc32(key.encode("utf-8")) % self.partitions(topic)

    # -------------------------------------------------------------------
    # Producing
    # -------------------------------------------------------------------
    def publish(self, topic: str, key: str, value: str, headers: dict[str, str] | None = None) -> Record:
        if not self.should_succeed:
            raise PublishFailure(topic, self.failure_reason)

        with self._lock:
            partition = self.partition_for(topic, key)
            log = self._topics[topic][partition]
            record = Record(
                topic=topic,
                partition=partition,
                offset=len(log),
                key=key,
                value=value,
                headers=dict(headers or {}),
                timestamp=datetime.now(UTC),
            )
            log.append(record)
            return record

    # -------------------------------------------------------------------
    # Consuming
    # -------------------------------------------------------------------
    def fetch(self, topic: str, partition: int, offset: int, limit: int = 100) -> list[Record]:
        with self._lock:
            self.create_topic(topic)
            return list(self._topics[topic][partition][offset : offset + limit])

    def end_offset(self, topic: str, partition: int) -> int:
        with self._lock:
            self.create_topic(topic)
            return len(self._topics[topic][partition])

    def committed(self, group: str, topic: str, partition: int) -> int:
        with self._lock:
            return self._offsets.get((group, topic, partition), 0)

    def commit(self, group: str, topic: str, partition: int, offset: int) -> None:
        with self._lock:
            current = self._offsets.get((group, topic, partition), 0)
            # Offsets never move backwards
            self._offsets[(group, topic, partition)] = max(current, offset)

    # -------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------
    def records(self, topic: str) -> list[Record]:
        """All records of a topic, partition by partition, in offset order."""
        with self._lock:
            self.create_topic(topic)
            return [record for log in self._topics[topic] for record in log]

    def reset(self):
        """Drop all topics and offsets (useful between tests)."""
        with self._lock:
            self._topics.clear()
            self._offsets.clear()
        self.should_succeed = True
        self.failure_reason = "Broker unavailable"
