"""Delivery status changes: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from delivery.clients import get_user_client
from delivery.delivery.announcements import announce_status_changed
from delivery.delivery.delivery import Delivery
from delivery.domain import delivery
from shared.errors import DeliveryNotFound
from shared.identity import RequestIdentity

logger = structlog.get_logger(__name__)


@delivery.command(part_of="Delivery")
class UpdateDeliveryStatus:
    delivery_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    requester = Text()  # JSON-encoded RequestIdentity


@delivery.command_handler(part_of=Delivery)
class UpdateDeliveryStatusHandler:
    @handle(UpdateDeliveryStatus)
    def update_status(self, command):
        identity = RequestIdentity.from_json(command.requester)
        repo = current_domain.repository_for(Delivery)
        try:
            dl = repo.get(command.delivery_id)
        except ObjectNotFoundError as exc:
            raise DeliveryNotFound(command.delivery_id) from exc

        previous = dl.change_status(command.status)
        repo.add(dl)

        announce_status_changed(dl, previous, get_user_client().get_email(dl.user_id, identity))

        logger.info(
            "Delivery status changed",
            delivery_id=str(dl.id),
            order_id=str(dl.order_id),
            old_status=previous,
            new_status=dl.status,
        )
        return dl.status
