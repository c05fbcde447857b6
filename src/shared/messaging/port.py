"""Messaging fabric port: an ordered, partitioned, append-only log.

The fabric is an external dependency (Kafka-like). Services program against
this interface; adapters are swapped via configuration. Semantics every
adapter must honour:

- Records are appended to a topic partition chosen from the record key, so
  all records sharing a key land on the same partition, in publish order.
- Ordering is per partition only.
- Each consumer group tracks one committed offset per (topic, partition).
  The committed offset is the position of the next record to deliver.
- Nothing is removed on read; an uncommitted record is delivered again.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Record:
    topic: str
    partition: int
    offset: int
    key: str
    value: str
    headers: dict[str, str] = field(default_factory=dict)
    timestamp: datetime | None = None


class MessagingPort(ABC):
    """Abstract interface for messaging fabric adapters."""

    @abstractmethod
    def create_topic(self, topic: str, partitions: int | None = None) -> None:
        """Create a topic if it does not exist yet."""
        ...

    @abstractmethod
    def partitions(self, topic: str) -> int:
        """Number of partitions of the topic."""
        ...

    @abstractmethod
    def partition_for(self, topic: str, key: str) -> int:
        """Partition a record with this key is routed to."""
        ...

    @abstractmethod
    def publish(self, topic: str, key: str, value: str, headers: dict[str, str] | None = None) -> Record:
        """Append a record and return it once the fabric has acknowledged it.

        Raises:
            PublishFailure: the fabric refused or failed to confirm the write.
        """
        ...

    @abstractmethod
    def fetch(self, topic: str, partition: int, offset: int, limit: int = 100) -> list[Record]:
        """Read up to ``limit`` records starting at ``offset``."""
        ...

    @abstractmethod
    def end_offset(self, topic: str, partition: int) -> int:
        """Offset the next appended record will receive."""
        ...

    @abstractmethod
    def committed(self, group: str, topic: str, partition: int) -> int:
        """Committed offset of the consumer group (0 when never committed)."""
        ...

    @abstractmethod
    def commit(self, group: str, topic: str, partition: int, offset: int) -> None:
        """Advance the consumer group's resume point to ``offset``."""
        ...

    def lag(self, group: str, topic: str) -> int:
        """Records appended but not yet committed by the group, summed over partitions."""
        return sum(
            self.end_offset(topic, partition) - self.committed(group, topic, partition)
            for partition in range(self.partitions(topic))
        )
