"""FastAPI routes for the Delivery service."""

from fastapi import APIRouter, Depends

from delivery.api.schemas import (
    CreateDeliveryRequest,
    DeliveryIdResponse,
    DeliveryResponse,
    UpdateDeliveryStatusRequest,
)
from delivery.delivery.creation import CreateDelivery
from delivery.delivery.queries import find_delivery, find_order_for_delivery, list_deliveries
from delivery.delivery.status import UpdateDeliveryStatus
from delivery.domain import delivery
from shared.identity import RequestIdentity, optional_identity, require_identity
from shared.web import in_domain_thread

delivery_router = APIRouter(prefix="/deliveries", tags=["deliveries"])


@delivery_router.post("", status_code=201, response_model=DeliveryIdResponse)
async def create_delivery(
    body: CreateDeliveryRequest,
    identity: RequestIdentity = Depends(require_identity),
) -> DeliveryIdResponse:
    """Create a delivery for an existing order."""
    command = CreateDelivery(
        order_id=body.order_id,
        user_id=body.user_id,
        expected_delivery_date=body.expected_delivery_date,
        requester=identity.to_json(),
    )
    result = await in_domain_thread(delivery, delivery.process, command, asynchronous=False)
    return DeliveryIdResponse(delivery_id=result)


@delivery_router.get("", response_model=list[DeliveryResponse])
async def get_deliveries(
    identity: RequestIdentity | None = Depends(optional_identity),
) -> list[DeliveryResponse]:
    return [DeliveryResponse.from_aggregate(dl) for dl in list_deliveries()]


@delivery_router.get("/{delivery_id}", response_model=DeliveryResponse)
async def get_delivery(
    delivery_id: str,
    identity: RequestIdentity | None = Depends(optional_identity),
) -> DeliveryResponse:
    return DeliveryResponse.from_aggregate(find_delivery(delivery_id))


@delivery_router.patch("/{delivery_id}/status", response_model=DeliveryResponse)
async def update_delivery_status(
    delivery_id: str,
    body: UpdateDeliveryStatusRequest,
    identity: RequestIdentity = Depends(require_identity),
) -> DeliveryResponse:
    """Move a delivery to a new status, subject to the state machine."""
    command = UpdateDeliveryStatus(
        delivery_id=delivery_id,
        status=body.status,
        requester=identity.to_json(),
    )
    await in_domain_thread(delivery, delivery.process, command, asynchronous=False)
    return DeliveryResponse.from_aggregate(find_delivery(delivery_id))


@delivery_router.get("/{delivery_id}/order")
async def get_delivery_order(
    delivery_id: str,
    identity: RequestIdentity | None = Depends(optional_identity),
) -> dict:
    """The order this delivery belongs to, as reported by the Order service."""
    return await in_domain_thread(delivery, find_order_for_delivery, delivery_id, identity)
