"""Remote service clients used by the Order service.

Built from ``PRODUCT_SERVICE_URL`` and ``DELIVERY_SERVICE_URL`` on first use.
"""

import os

_product_client = None
_delivery_client = None


def get_product_client():
    """Return the configured Product service client (singleton)."""
    global _product_client
    if _product_client is None:
        from ordering.clients.product_client import ProductClient

        _product_client = ProductClient(os.environ.get("PRODUCT_SERVICE_URL", "http://localhost:8002"))
    return _product_client


def get_delivery_client():
    """Return the configured Delivery service client (singleton)."""
    global _delivery_client
    if _delivery_client is None:
        from ordering.clients.delivery_client import DeliveryClient

        _delivery_client = DeliveryClient(os.environ.get("DELIVERY_SERVICE_URL", "http://localhost:8000"))
    return _delivery_client


def set_product_client(client):
    global _product_client
    _product_client = client


def set_delivery_client(client):
    global _delivery_client
    _delivery_client = client


def reset_clients():
    """Reset the client singletons (useful for testing)."""
    global _product_client, _delivery_client
    _product_client = None
    _delivery_client = None
