import pytest
from shared.messaging.memory import InMemoryLog


@pytest.fixture(autouse=True)
def _ctx(delivery_bed):
    with delivery_bed.domain_context():
        yield


@pytest.fixture
def log():
    return InMemoryLog(default_partitions=3)
