"""Error taxonomy shared by the Order, Delivery, and Notification services.

Four families matter to callers:

- NotFound: an order, delivery, product, or user is absent. Surfaces to the
  synchronous caller as-is; never retried.
- InvalidTransition: the delivery state machine rejected a status change.
- UpstreamUnavailable: a remote dependency failed (5xx, network, timeout).
  Aborts the in-progress write; nothing partial is persisted.
- PublishFailure: the messaging fabric refused or failed to confirm a publish.
  Only ever seen by the outbox dispatcher, which retries.

Each error carries a short machine-readable ``code`` used in HTTP responses.
"""


class ServiceError(Exception):
    code = "service_error"

    def __init__(self, message: str | None = None):
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class NotFound(ServiceError):
    code = "not_found"


class OrderNotFound(NotFound):
    code = "order_not_found"

    def __init__(self, order_id, message: str | None = None):
        self.order_id = str(order_id)
        super().__init__(message or f"Order {order_id} not found")


class DeliveryNotFound(NotFound):
    code = "delivery_not_found"

    def __init__(self, delivery_id, message: str | None = None):
        self.delivery_id = str(delivery_id)
        super().__init__(message or f"Delivery {delivery_id} not found")


class UserNotFound(NotFound):
    code = "user_not_found"

    def __init__(self, user_id, message: str | None = None):
        self.user_id = str(user_id)
        super().__init__(message or f"User {user_id} not found")


class DeliveryNotAssigned(ServiceError):
    """The order exists but no delivery has been linked to it yet.

    Distinct from DeliveryNotFound: the link is an eventually-consistent
    projection of the Delivery service's state, so "not yet linked" is a
    normal, temporary condition.
    """

    code = "delivery_not_linked"

    def __init__(self, order_id):
        self.order_id = str(order_id)
        super().__init__(f"No delivery linked to order {order_id} yet")


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------
class InvalidTransition(ServiceError):
    code = "invalid_transition"


# ---------------------------------------------------------------------------
# Upstream failures
# ---------------------------------------------------------------------------
class UpstreamUnavailable(ServiceError):
    code = "upstream_unavailable"


class OrderServiceUnavailable(UpstreamUnavailable):
    code = "order_service_unavailable"


class DeliveryServiceUnavailable(UpstreamUnavailable):
    code = "delivery_service_unavailable"


class UserServiceUnavailable(UpstreamUnavailable):
    code = "user_service_unavailable"


class ProductServiceError(ServiceError):
    """Any failure to price an order line item."""

    code = "product_service_error"


class ProductNotFound(NotFound, ProductServiceError):
    code = "product_not_found"

    def __init__(self, product_id, message: str | None = None):
        self.product_id = str(product_id)
        ServiceError.__init__(self, message or f"Product {product_id} not found")


class ProductServiceUnavailable(UpstreamUnavailable, ProductServiceError):
    code = "product_service_unavailable"


# ---------------------------------------------------------------------------
# Messaging
# ---------------------------------------------------------------------------
class PublishFailure(ServiceError):
    code = "publish_failure"

    def __init__(self, topic: str, reason: str):
        self.topic = topic
        self.reason = reason
        super().__init__(f"Failed to publish to '{topic}': {reason}")


class NotificationDeliveryFailed(ServiceError):
    code = "notification_delivery_failed"


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------
class InvalidIdentity(ServiceError):
    code = "invalid_identity"
