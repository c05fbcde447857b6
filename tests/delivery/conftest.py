import pytest
from delivery.clients import set_order_client, set_user_client
from delivery.clients.order_client import OrderClient
from delivery.clients.user_client import UserClient


@pytest.fixture(autouse=True)
def _ctx(delivery_bed):
    with delivery_bed.domain_context():
        yield


@pytest.fixture
def order_service(fake_remote):
    """Order service answering 404 for every order until one is scripted."""
    remote = fake_remote()
    set_order_client(OrderClient(http=remote.client("http://orders")))
    return remote


@pytest.fixture
def user_service(fake_remote):
    remote = fake_remote()
    set_user_client(UserClient(http=remote.client("http://users")))
    return remote
