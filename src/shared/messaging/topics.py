"""Topic names and consumer groups of the synchronization protocol.

| Topic                    | Key         | Payload               | Consumers            |
|--------------------------|-------------|-----------------------|----------------------|
| delivery-created         | order_id    | DeliveryCreated       | order-service        |
| delivery-status-changed  | delivery_id | DeliveryStatusChanged | order-service        |
| delivery-events          | delivery_id | Notification          | notification-service |
| order-events             | order_id    | Notification          | notification-service |
"""

DELIVERY_CREATED = "delivery-created"
DELIVERY_STATUS_CHANGED = "delivery-status-changed"
DELIVERY_EVENTS = "delivery-events"
ORDER_EVENTS = "order-events"

ORDER_SERVICE_GROUP = "order-service"
NOTIFICATION_SERVICE_GROUP = "notification-service"

ALL_TOPICS = (DELIVERY_CREATED, DELIVERY_STATUS_CHANGED, DELIVERY_EVENTS, ORDER_EVENTS)

DEAD_LETTER_SUFFIX = ".dlq"


def dead_letter_topic(topic: str) -> str:
    return f"{topic}{DEAD_LETTER_SUFFIX}"
