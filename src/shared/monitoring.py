"""Operational dashboard for the status synchronization protocol.

Exposes outbox depth per producing domain, consumer lag per group and
topic, dead-letter topic depth, and Prometheus metrics for one Runtime.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from shared.messaging.topics import ALL_TOPICS, dead_letter_topic
from shared.runtime import Runtime

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _outbox_status(dispatcher):
    """Query outbox counts for a domain."""
    try:
        return {"status": "ok", "counts": dispatcher.status_counts()}
    except Exception as e:
        logger.error("Error querying outbox", domain=dispatcher.domain.name, error=str(e))
        return {"status": "error", "error": str(e)}


def _consumer_lag(runtime: Runtime) -> dict:
    lag: dict[str, dict[str, int]] = {}
    for worker in runtime.workers:
        for subscription in worker.subscriptions:
            lag.setdefault(subscription.group, {})[subscription.topic] = runtime.fabric.lag(
                subscription.group, subscription.topic
            )
    return lag


def _dead_letters(runtime: Runtime) -> dict:
    fabric = runtime.fabric
    depths = {}
    for topic in ALL_TOPICS:
        dlq = dead_letter_topic(topic)
        depths[dlq] = sum(fabric.end_offset(dlq, partition) for partition in range(fabric.partitions(dlq)))
    return depths


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
def create_monitor_app(runtime: Runtime) -> FastAPI:
    monitor = FastAPI(
        title="Fulfillment Monitor",
        description="Outbox depth, consumer lag and dead letters of the status synchronization protocol",
    )

    monitor.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @monitor.get("/")
    async def root():
        """Overall system status."""
        return JSONResponse(content={"service": "Fulfillment Monitor", "services": list(runtime.services)})

    @monitor.get("/health")
    async def health():
        dead_letters = _dead_letters(runtime)
        return JSONResponse(
            content={
                "status": "degraded" if any(dead_letters.values()) else "ok",
                "dead_letters": dead_letters,
            }
        )

    @monitor.get("/outbox")
    async def outbox_summary():
        """Outbox status for every producing domain."""
        return JSONResponse(
            content={dispatcher.domain.name: _outbox_status(dispatcher) for dispatcher in runtime.dispatchers}
        )

    @monitor.get("/consumers")
    async def consumers():
        """Uncommitted records per consumer group and topic."""
        return JSONResponse(content={"lag": _consumer_lag(runtime)})

    @monitor.get("/dead-letters")
    async def dead_letters():
        return JSONResponse(content=_dead_letters(runtime))

    @monitor.get("/metrics")
    async def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return monitor
