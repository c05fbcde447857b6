"""Consumer loop with acknowledge-after-success and bounded redelivery.

A ``Subscription`` binds a topic and consumer group to a handler and the
contract its records decode into. ``ConsumerWorker.poll()`` walks every
partition of every subscription from the group's committed offset:

- records of one partition are handled strictly in offset order;
- the offset is committed only after the handler returns;
- a failing record is left uncommitted, which stops that partition for the
  current poll, and is delivered again on the next one;
- once a record has failed ``max_retries`` times it is copied to the
  topic's dead-letter topic, an alert is logged, and its offset committed so
  the partition can make progress again.
"""

import asyncio
import os
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from shared.errors import PublishFailure
from shared.logging import bind_message_context, clear_message_context
from shared.messaging import metrics
from shared.messaging.codec import decode
from shared.messaging.port import MessagingPort, Record
from shared.messaging.topics import dead_letter_topic

logger = structlog.get_logger(__name__)

DEFAULT_MAX_RETRIES = 5
DEFAULT_BATCH_SIZE = 100
DEFAULT_POLL_INTERVAL = 0.5


@dataclass
class Subscription:
    topic: str
    group: str
    contract: type
    handler: Callable
    domain: object | None = None  # Protean domain whose context the handler needs

    def deliver(self, record: Record) -> None:
        if self.domain is None:
            self.handler(decode(self.contract, record.value))
            return
        with self.domain.domain_context():
            self.handler(decode(self.contract, record.value))


class ConsumerWorker:
    def __init__(
        self,
        fabric: MessagingPort,
        subscriptions: list[Subscription],
        max_retries: int | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.fabric = fabric
        self.subscriptions = subscriptions
        if max_retries is None:
            max_retries = int(os.environ.get("CONSUMER_MAX_RETRIES", DEFAULT_MAX_RETRIES))
        self.max_retries = max_retries
        self.batch_size = batch_size
        # Failure count per record position: (group, topic, partition, offset)
        self._failures: dict[tuple[str, str, int, int], int] = {}

    def poll(self) -> int:
        """Process one batch from every assigned partition.

        Returns the number of records acknowledged (dead-lettered included).
        """
        acknowledged = 0
        for subscription in self.subscriptions:
            for partition in range(self.fabric.partitions(subscription.topic)):
                acknowledged += self._poll_partition(subscription, partition)
            metrics.consumer_lag.labels(group=subscription.group, topic=subscription.topic).set(
                self.fabric.lag(subscription.group, subscription.topic)
            )
        return acknowledged

    def drain(self, max_polls: int = 100) -> int:
        """Poll until a poll acknowledges nothing or ``max_polls`` is reached."""
        total = 0
        for _ in range(max_polls):
            acknowledged = self.poll()
            total += acknowledged
            if acknowledged == 0:
                break
        return total

    async def run(self, stop_event: asyncio.Event, poll_interval: float | None = None) -> None:
        """Consume loop; returns when ``stop_event`` is set."""
        if poll_interval is None:
            poll_interval = float(os.environ.get("CONSUMER_POLL_INTERVAL", DEFAULT_POLL_INTERVAL))
        logger.info(
            "Consumer worker started",
            subscriptions=[f"{s.group}:{s.topic}" for s in self.subscriptions],
            max_retries=self.max_retries,
        )
        while not stop_event.is_set():
            if await asyncio.to_thread(self.poll) == 0:
                try:
                    await asyncio.wait_for(stop_event.wait(), poll_interval)
                except TimeoutError:
                    pass
        logger.info("Consumer worker stopped")

    def failures_for(self, subscription: Subscription, record: Record) -> int:
        return self._failures.get((subscription.group, record.topic, record.partition, record.offset), 0)

    # -------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------
    def _poll_partition(self, subscription: Subscription, partition: int) -> int:
        group, topic = subscription.group, subscription.topic
        offset = self.fabric.committed(group, topic, partition)
        records = self.fabric.fetch(topic, partition, offset, self.batch_size)

        acknowledged = 0
        for record in records:
            bind_message_context(topic=topic, partition=partition, offset=record.offset, group=group)
            try:
                subscription.deliver(record)
            except Exception as exc:
                if not self._record_failure(subscription, record, exc):
                    # Leave uncommitted; redelivered on the next poll.
                    return acknowledged
            else:
                self._failures.pop((group, topic, partition, record.offset), None)
                metrics.messages_consumed_total.labels(group=group, topic=topic).inc()
            finally:
                clear_message_context()

            self.fabric.commit(group, topic, partition, record.offset + 1)
            acknowledged += 1

        return acknowledged

    def _record_failure(self, subscription: Subscription, record: Record, exc: Exception) -> bool:
        """Count a handler failure. Returns True when the record was dead-lettered."""
        position = (subscription.group, record.topic, record.partition, record.offset)
        attempts = self._failures.get(position, 0) + 1
        self._failures[position] = attempts
        metrics.consumer_failures_total.labels(group=subscription.group, topic=record.topic).inc()

        if attempts < self.max_retries:
            logger.warning(
                "Handler failed, record left unacknowledged",
                key=record.key,
                attempt=attempts,
                max_retries=self.max_retries,
                error=str(exc),
            )
            return False

        dlq = dead_letter_topic(record.topic)
        headers = {
            **record.headers,
            "original_topic": record.topic,
            "original_partition": str(record.partition),
            "original_offset": str(record.offset),
            "consumer_group": subscription.group,
            "error": f"{type(exc).__name__}: {exc}",
            "attempts": str(attempts),
        }
        try:
            self.fabric.publish(dlq, record.key, record.value, headers)
        except PublishFailure as publish_exc:
            logger.error(
                "Dead-letter publish failed, record left unacknowledged",
                key=record.key,
                dead_letter_topic=dlq,
                error=str(publish_exc),
            )
            return False

        self._failures.pop(position, None)
        metrics.messages_dead_lettered_total.labels(group=subscription.group, topic=record.topic).inc()
        logger.error(
            "Record dead-lettered after exhausting retries",
            key=record.key,
            dead_letter_topic=dlq,
            attempts=attempts,
            error=str(exc),
        )
        return True
