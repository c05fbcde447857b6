"""Delivery service client: read-through lookups of linked deliveries."""

from shared.errors import DeliveryNotFound, DeliveryServiceUnavailable
from shared.http import ServiceClient
from shared.identity import RequestIdentity


class DeliveryClient(ServiceClient):
    service_name = "delivery-service"
    unavailable = DeliveryServiceUnavailable

    def get_delivery(self, delivery_id: str, identity: RequestIdentity | None = None) -> dict:
        """``GET /deliveries/{id}``. Raises DeliveryNotFound or DeliveryServiceUnavailable."""
        return self._get_json(f"/deliveries/{delivery_id}", DeliveryNotFound(delivery_id), identity)
