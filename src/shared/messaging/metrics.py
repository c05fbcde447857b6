"""Operational signals for the asynchronous half of the protocol.

Asynchronous failures are invisible to API clients, so they are surfaced
here and exposed by the monitor at /metrics.
"""

from prometheus_client import Counter, Gauge

outbox_published_total = Counter(
    "fulfillment_outbox_published_total",
    "Outbox messages published to the messaging fabric",
    ["domain", "topic"],
)

outbox_publish_failures_total = Counter(
    "fulfillment_outbox_publish_failures_total",
    "Failed attempts to publish an outbox message",
    ["domain", "topic"],
)

outbox_pending = Gauge(
    "fulfillment_outbox_pending",
    "Outbox messages waiting to be published",
    ["domain"],
)

messages_consumed_total = Counter(
    "fulfillment_messages_consumed_total",
    "Records processed and acknowledged by a consumer group",
    ["group", "topic"],
)

consumer_failures_total = Counter(
    "fulfillment_consumer_failures_total",
    "Handler failures; the record stays unacknowledged",
    ["group", "topic"],
)

messages_dead_lettered_total = Counter(
    "fulfillment_messages_dead_lettered_total",
    "Records routed to a dead-letter topic after exhausting retries",
    ["group", "topic"],
)

consumer_lag = Gauge(
    "fulfillment_consumer_lag",
    "Records appended but not yet committed by the consumer group",
    ["group", "topic"],
)
