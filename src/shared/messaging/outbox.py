"""Transactional outbox: event intents persisted with the entity write.

Command handlers stage outbound messages with ``stage()`` inside the same
unit of work as the aggregate they change, so an entity mutation and the
events announcing it commit (or roll back) together. ``OutboxDispatcher``
later publishes pending rows to the messaging fabric, marks them published,
and retries failures indefinitely with exponential backoff.

Per-key order is preserved: within one dispatch pass, once a message for a
(topic, key) fails or is still backing off, later messages for that same
(topic, key) are held back.

Each producing domain declares its own ``OutboxMessage`` aggregate with the
fields below and mixes in ``OutboxMessageMixin`` for behaviour:

    topic, key, payload, status, attempts, last_error,
    next_attempt_at, created_at, published_at
"""

import asyncio
import os
from datetime import UTC, datetime, timedelta
from enum import Enum

import structlog
from protean.utils.globals import current_domain

from shared.errors import PublishFailure
from shared.messaging import metrics
from shared.messaging.codec import encode
from shared.messaging.port import MessagingPort

logger = structlog.get_logger(__name__)

DEFAULT_BACKOFF_BASE_SECONDS = 1.0
DEFAULT_BACKOFF_MAX_SECONDS = 60.0
DEFAULT_POLL_INTERVAL = 0.5


class OutboxStatus(Enum):
    PENDING = "PENDING"
    PUBLISHED = "PUBLISHED"


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class OutboxMessageMixin:
    """Behaviour shared by every domain's OutboxMessage aggregate."""

    @classmethod
    def for_event(cls, topic: str, key, event):
        return cls(
            topic=topic,
            key=str(key),
            payload=encode(event),
            status=OutboxStatus.PENDING.value,
            attempts=0,
            created_at=datetime.now(UTC),
        )

    def is_due(self, now: datetime) -> bool:
        if self.next_attempt_at is None:
            return True
        return _aware(self.next_attempt_at) <= _aware(now)

    def mark_published(self, now: datetime) -> None:
        self.status = OutboxStatus.PUBLISHED.value
        self.attempts = (self.attempts or 0) + 1
        self.published_at = now
        self.last_error = None
        self.next_attempt_at = None

    def mark_failed(self, reason: str, retry_in: timedelta, now: datetime) -> None:
        self.attempts = (self.attempts or 0) + 1
        self.last_error = reason
        self.next_attempt_at = now + retry_in


def stage(outbox_cls, topic: str, key, event):
    """Persist an outbound event in the active unit of work."""
    message = outbox_cls.for_event(topic, key, event)
    current_domain.repository_for(outbox_cls).add(message)
    return message


def backoff_delay(attempts: int, base: float, cap: float) -> timedelta:
    """Exponential backoff: base, 2*base, 4*base, ... capped at ``cap``."""
    return timedelta(seconds=min(cap, base * (2 ** max(attempts - 1, 0))))


class OutboxDispatcher:
    def __init__(
        self,
        domain,
        outbox_cls,
        fabric: MessagingPort,
        backoff_base: float | None = None,
        backoff_max: float | None = None,
    ):
        self.domain = domain
        self.outbox_cls = outbox_cls
        self.fabric = fabric
        if backoff_base is None:
            backoff_base = float(os.environ.get("OUTBOX_BACKOFF_BASE_SECONDS", DEFAULT_BACKOFF_BASE_SECONDS))
        if backoff_max is None:
            backoff_max = float(os.environ.get("OUTBOX_BACKOFF_MAX_SECONDS", DEFAULT_BACKOFF_MAX_SECONDS))
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max

    def dispatch_pending(self, now: datetime | None = None) -> int:
        """Publish every due pending message. Returns the number published."""
        now = now or datetime.now(UTC)
        published = 0
        blocked: set[tuple[str, str]] = set()

        with self.domain.domain_context():
            repo = current_domain.repository_for(self.outbox_cls)
            pending = self._pending(repo)

            for message in pending:
                stream = (message.topic, message.key)
                if stream in blocked or not message.is_due(now):
                    blocked.add(stream)
                    continue

                try:
                    self.fabric.publish(
                        message.topic,
                        message.key,
                        message.payload,
                        {"message_id": str(message.id), "source": self.domain.name},
                    )
                except PublishFailure as exc:
                    retry_in = backoff_delay((message.attempts or 0) + 1, self.backoff_base, self.backoff_max)
                    message.mark_failed(str(exc), retry_in, now)
                    blocked.add(stream)
                    metrics.outbox_publish_failures_total.labels(domain=self.domain.name, topic=message.topic).inc()
                    logger.error(
                        "Outbox publish failed, will retry",
                        domain=self.domain.name,
                        message_id=str(message.id),
                        topic=message.topic,
                        key=message.key,
                        attempts=message.attempts,
                        retry_in_seconds=retry_in.total_seconds(),
                        error=str(exc),
                    )
                else:
                    message.mark_published(now)
                    published += 1
                    metrics.outbox_published_total.labels(domain=self.domain.name, topic=message.topic).inc()
                    logger.info(
                        "Outbox message published",
                        domain=self.domain.name,
                        message_id=str(message.id),
                        topic=message.topic,
                        key=message.key,
                    )

                repo.add(message)

        metrics.outbox_pending.labels(domain=self.domain.name).set(len(pending) - published)
        return published

    def status_counts(self) -> dict[str, int]:
        """Outbox depth by status, for monitoring."""
        with self.domain.domain_context():
            repo = current_domain.repository_for(self.outbox_cls)
            return {
                status.value: len(repo._dao.query.filter(status=status.value).all().items) for status in OutboxStatus
            }

    async def run(self, stop_event: asyncio.Event, poll_interval: float | None = None) -> None:
        """Dispatch loop; returns when ``stop_event`` is set.

        Each pass runs in a worker thread so repository and fabric calls do
        not block the event loop.
        """
        if poll_interval is None:
            poll_interval = float(os.environ.get("OUTBOX_POLL_INTERVAL", DEFAULT_POLL_INTERVAL))
        logger.info("Outbox dispatcher started", domain=self.domain.name)
        while not stop_event.is_set():
            if await asyncio.to_thread(self.dispatch_pending) == 0:
                try:
                    await asyncio.wait_for(stop_event.wait(), poll_interval)
                except TimeoutError:
                    pass
        logger.info("Outbox dispatcher stopped", domain=self.domain.name)

    def _pending(self, repo) -> list:
        items = repo._dao.query.filter(status=OutboxStatus.PENDING.value).order_by("created_at").all().items
        return sorted(items, key=lambda message: _aware(message.created_at))
