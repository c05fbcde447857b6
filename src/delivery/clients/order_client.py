"""Order service client: existence checks and read-through lookups."""

from shared.errors import OrderNotFound, OrderServiceUnavailable
from shared.http import ServiceClient
from shared.identity import RequestIdentity


class OrderClient(ServiceClient):
    service_name = "order-service"
    unavailable = OrderServiceUnavailable

    def get_order(self, order_id: str, identity: RequestIdentity | None = None) -> dict:
        """``GET /orders/{id}``. Raises OrderNotFound or OrderServiceUnavailable."""
        return self._get_json(f"/orders/{order_id}", OrderNotFound(order_id), identity)
