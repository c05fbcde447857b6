"""Remote service clients used by the Delivery service.

Clients are process-wide singletons built from ``ORDER_SERVICE_URL`` and
``USER_SERVICE_URL``. Tests and the combined app swap them with the
``set_*`` functions.
"""

import os

_order_client = None
_user_client = None


def get_order_client():
    """Return the configured Order service client (singleton)."""
    global _order_client
    if _order_client is None:
        from delivery.clients.order_client import OrderClient

        _order_client = OrderClient(os.environ.get("ORDER_SERVICE_URL", "http://localhost:8000"))
    return _order_client


def get_user_client():
    """Return the configured User service client (singleton)."""
    global _user_client
    if _user_client is None:
        from delivery.clients.user_client import UserClient

        _user_client = UserClient(os.environ.get("USER_SERVICE_URL", "http://localhost:8001"))
    return _user_client


def set_order_client(client):
    global _order_client
    _order_client = client


def set_user_client(client):
    global _user_client
    _user_client = client


def reset_clients():
    """Reset the client singletons (useful for testing)."""
    global _order_client, _user_client
    _order_client = None
    _user_client = None
