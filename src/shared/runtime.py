"""Background workers of the three services, wired to one messaging fabric.

A service contributes an outbox dispatcher when it produces events and a
consumer worker when it subscribes to topics:

    delivery       outbox dispatcher
    ordering       outbox dispatcher + consumer worker (group order-service)
    notifications  consumer worker (group notification-service)

``Runtime.run()`` gathers every runner as an asyncio task until its stop
event is set, and ``Runtime.lifespan`` does so for the lifetime of an ASGI
app. ``Runtime.pump()`` runs one synchronous round, which is what tests use.
Domains must already be initialized.
"""

import asyncio
from contextlib import asynccontextmanager

import structlog

from shared.messaging.consumer import ConsumerWorker
from shared.messaging.outbox import OutboxDispatcher
from shared.messaging.port import MessagingPort
from shared.messaging.topics import ALL_TOPICS, dead_letter_topic

logger = structlog.get_logger(__name__)

SERVICES = ("delivery", "ordering", "notifications")


def _dispatcher_for(name: str, fabric: MessagingPort) -> OutboxDispatcher | None:
    if name == "delivery":
        from delivery.domain import delivery
        from delivery.outbox import OutboxMessage

        return OutboxDispatcher(delivery, OutboxMessage, fabric)
    if name == "ordering":
        from ordering.domain import ordering
        from ordering.outbox import OutboxMessage

        return OutboxDispatcher(ordering, OutboxMessage, fabric)
    return None


def _subscriptions_for(name: str) -> list:
    if name == "ordering":
        from ordering.subscriptions import order_service_subscriptions

        return order_service_subscriptions()
    if name == "notifications":
        from notifications.subscriptions import notification_service_subscriptions

        return notification_service_subscriptions()
    return []


class Runtime:
    def __init__(self, fabric: MessagingPort, services=SERVICES, max_retries: int | None = None):
        unknown = set(services) - set(SERVICES)
        if unknown:
            raise ValueError(f"Unknown service(s): {', '.join(sorted(unknown))}")

        self.fabric = fabric
        self.services = tuple(services)
        self.dispatchers: list[OutboxDispatcher] = []
        self.workers: list[ConsumerWorker] = []
        for name in self.services:
            dispatcher = _dispatcher_for(name, fabric)
            if dispatcher is not None:
                self.dispatchers.append(dispatcher)
            subscriptions = _subscriptions_for(name)
            if subscriptions:
                self.workers.append(ConsumerWorker(fabric, subscriptions, max_retries=max_retries))

    def create_topics(self) -> None:
        for topic in ALL_TOPICS:
            self.fabric.create_topic(topic)
            self.fabric.create_topic(dead_letter_topic(topic))

    def pump(self, rounds: int = 1) -> None:
        """Dispatch every outbox, then poll every worker, ``rounds`` times."""
        for _ in range(rounds):
            for dispatcher in self.dispatchers:
                dispatcher.dispatch_pending()
            for worker in self.workers:
                worker.poll()

    async def run(self, stop_event: asyncio.Event) -> None:
        """Run every dispatcher and worker until ``stop_event`` is set."""
        self.create_topics()
        logger.info(
            "Runtime started",
            services=list(self.services),
            dispatchers=len(self.dispatchers),
            workers=len(self.workers),
        )
        await asyncio.gather(*(runner.run(stop_event) for runner in [*self.dispatchers, *self.workers]))
        logger.info("Runtime stopped", services=list(self.services))

    @asynccontextmanager
    async def lifespan(self, _app=None):
        """ASGI lifespan: the runtime runs for as long as the app serves."""
        stop_event = asyncio.Event()
        task = asyncio.create_task(self.run(stop_event))
        try:
            yield
        finally:
            stop_event.set()
            await task
