"""Delivery creation: command and handler."""

import structlog
from protean import handle
from protean.fields import Date, Identifier, Text
from protean.utils.globals import current_domain

from delivery.clients import get_order_client, get_user_client
from delivery.delivery.announcements import announce_created
from delivery.delivery.delivery import Delivery
from delivery.domain import delivery
from shared.identity import RequestIdentity

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Delivery")
class CreateDelivery:
    """Create a delivery for an existing order."""

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    expected_delivery_date = Date()
    requester = Text()  # JSON-encoded RequestIdentity


@delivery.command_handler(part_of=Delivery)
class CreateDeliveryHandler:
    @handle(CreateDelivery)
    def create_delivery(self, command):
        identity = RequestIdentity.from_json(command.requester)

        # Raises OrderNotFound / OrderServiceUnavailable before anything is written
        get_order_client().get_order(command.order_id, identity)

        dl = Delivery.create(
            order_id=command.order_id,
            user_id=command.user_id,
            expected_delivery_date=command.expected_delivery_date,
        )
        current_domain.repository_for(Delivery).add(dl)

        announce_created(dl, get_user_client().get_email(dl.user_id, identity))

        logger.info("Delivery created", delivery_id=str(dl.id), order_id=str(dl.order_id))
        return str(dl.id)
