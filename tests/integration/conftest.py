"""Fixtures for cross-service integration tests.

All three services run in-process against one in-memory messaging fabric.
The HTTP surfaces of both services are served by one TestClient. Their
RPC calls to each other go to scripted FakeRemotes, like the calls to the
external User and Product services: a request issued from inside a request
handler must not re-enter the app under test.
"""

from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient


@pytest.fixture(autouse=True)
def _contexts(delivery_bed, ordering_bed, notifications_bed):
    """Hold every domain's test context so each test starts from empty stores."""
    with ExitStack() as stack:
        for bed in (delivery_bed, ordering_bed, notifications_bed):
            stack.enter_context(bed.domain_context())
        yield


@pytest.fixture
def api():
    from shared.web import create_app

    with TestClient(create_app()) as client:
        yield client


@pytest.fixture
def remotes(fake_remote):
    """Wire every RPC client to a FakeRemote. Tests script peers as they create records."""
    from delivery.clients import set_order_client, set_user_client
    from delivery.clients.order_client import OrderClient
    from delivery.clients.user_client import UserClient
    from ordering.clients import set_delivery_client, set_product_client
    from ordering.clients.delivery_client import DeliveryClient
    from ordering.clients.product_client import ProductClient

    users = fake_remote()
    users.respond("/users/user-1", body={"id": "user-1", "email": "jane@example.com"})
    products = fake_remote()
    products.respond("/products/prod-1", body={"id": "prod-1", "price": 25.0})

    orders = fake_remote()
    deliveries = fake_remote()

    set_order_client(OrderClient(http=orders.client("http://orders")))
    set_delivery_client(DeliveryClient(http=deliveries.client("http://deliveries")))
    set_user_client(UserClient(http=users.client("http://users")))
    set_product_client(ProductClient(http=products.client("http://products")))
    return {"users": users, "products": products, "orders": orders, "deliveries": deliveries}


@pytest.fixture
def runtime(remotes):
    from shared.messaging import get_fabric
    from shared.runtime import Runtime

    runtime = Runtime(get_fabric(), max_retries=3)
    runtime.create_topics()
    return runtime


@pytest.fixture
def sender():
    from notifications.channel import get_sender

    return get_sender()
