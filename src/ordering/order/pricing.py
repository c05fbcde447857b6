"""Line-item pricing against the Product service."""

import structlog
from protean.exceptions import ValidationError

from ordering.clients import get_product_client
from shared.errors import ProductServiceError
from shared.identity import RequestIdentity

logger = structlog.get_logger(__name__)


def price_items(items: list[dict], identity: RequestIdentity | None = None) -> list[dict]:
    """Look up the current unit price of every line item, one call per item.

    Any failure aborts the whole pricing with a ProductServiceError; nothing
    is partially priced.
    """
    if not items:
        raise ValidationError({"items": ["An order needs at least one item"]})

    client = get_product_client()
    priced = []
    for item in items:
        product_id = str(item["product_id"])
        quantity = int(item["quantity"])
        if quantity < 1:
            raise ValidationError({"items": [f"Quantity for product {product_id} must be at least 1"]})
        try:
            unit_price = client.get_price(product_id, identity)
        except ProductServiceError as exc:
            logger.error("Failed to price product", product_id=product_id, error=exc.code)
            raise
        priced.append({"product_id": product_id, "quantity": quantity, "unit_price": unit_price})

    logger.debug("Priced order items", count=len(priced), total=sum(i["unit_price"] * i["quantity"] for i in priced))
    return priced
