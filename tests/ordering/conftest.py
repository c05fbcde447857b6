import pytest
from ordering.clients import set_delivery_client, set_product_client
from ordering.clients.delivery_client import DeliveryClient
from ordering.clients.product_client import ProductClient


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture
def product_service(fake_remote):
    """Product service with two priced products."""
    remote = fake_remote()
    remote.respond("/products/prod-1", body={"id": "prod-1", "name": "Kettle", "price": 25.0})
    remote.respond("/products/prod-2", body={"id": "prod-2", "name": "Mug", "product_price": 7.5})
    set_product_client(ProductClient(http=remote.client("http://products")))
    return remote


@pytest.fixture
def delivery_service(fake_remote):
    remote = fake_remote()
    set_delivery_client(DeliveryClient(http=remote.client("http://deliveries")))
    return remote
