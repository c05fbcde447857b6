"""Inbound handler: every Notification from ``order-events`` and ``delivery-events``.

Each record is forwarded to the configured sender and the attempt is recorded
as a Dispatch row. The row is written before the outcome is reported, outside
any unit of work, so a FAILED attempt stays on record even though the
NotificationDeliveryFailed raised afterwards leaves the record unacknowledged
for redelivery. Exhausted retries end up on the topic's dead-letter topic.
"""

from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from notifications.channel import get_sender
from notifications.dispatch.dispatch import Dispatch, DispatchStatus
from notifications.domain import notifications
from shared.errors import NotificationDeliveryFailed
from shared.events.notifications import Notification

logger = structlog.get_logger(__name__)

notifications.register_external_event(Notification, "Notifications.Notification.v1")


def _record(event: Notification, result: dict, sent: bool) -> Dispatch:
    dispatch = Dispatch(
        event_type=event.event_type,
        order_id=event.order_id,
        delivery_id=event.delivery_id,
        user_id=event.user_id,
        user_email=event.user_email,
        status=DispatchStatus.SENT.value if sent else DispatchStatus.FAILED.value,
        sender_message_id=result.get("message_id"),
        error=result.get("error"),
        dispatched_at=datetime.now(UTC),
    )
    current_domain.repository_for(Dispatch).add(dispatch)
    return dispatch


def forward_notification(event: Notification) -> None:
    """Send one notification; raise NotificationDeliveryFailed if the sender refused it."""
    result = get_sender().send(event)
    sent = result.get("status") == "sent"
    _record(event, result, sent)

    if not sent:
        logger.warning(
            "Notification delivery failed",
            event_type=event.event_type,
            order_id=str(event.order_id),
            error=result.get("error"),
        )
        raise NotificationDeliveryFailed(result.get("error") or "Notification delivery failed")

    logger.info(
        "Notification dispatched",
        event_type=event.event_type,
        order_id=str(event.order_id),
        message_id=result.get("message_id"),
    )
