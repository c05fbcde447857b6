import os
from pathlib import Path

import httpx
import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Selects the Protean config overlay and the in-process adapters every
    test relies on.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["MESSAGING_ADAPTER"] = "memory"
    os.environ["NOTIFICATION_SENDER"] = "fake"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


# ---------------------------------------------------------------------------
# Domain beds, shared by per-context and cross-service tests
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def delivery_bed():
    from delivery.domain import delivery

    bed = DomainFixture(delivery)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session")
def notifications_bed():
    from notifications.domain import notifications

    bed = DomainFixture(notifications)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def reset_adapters():
    """Drop every process-wide adapter singleton after each test."""
    yield

    from delivery.clients import reset_clients as reset_delivery_clients
    from notifications.channel import reset_sender
    from ordering.clients import reset_clients as reset_ordering_clients
    from shared.messaging import reset_fabric

    reset_fabric()
    reset_sender()
    reset_delivery_clients()
    reset_ordering_clients()


# ---------------------------------------------------------------------------
# Remote services
# ---------------------------------------------------------------------------
class FakeRemote:
    """A scripted remote service behind an httpx.MockTransport.

    Unscripted paths answer 404. ``fail_with`` makes every call raise.
    """

    def __init__(self):
        self.responses: dict[str, tuple[int, object]] = {}
        self.requests: list[httpx.Request] = []
        self.error: Exception | None = None

    def respond(self, path: str, status: int = 200, body=None):
        self.responses[path] = (status, body)

    def fail_with(self, error: Exception):
        self.error = error

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        status, body = self.responses.get(request.url.path, (404, {"error": "not_found"}))
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def client(self, base_url: str = "http://remote") -> httpx.Client:
        return httpx.Client(base_url=base_url, transport=httpx.MockTransport(self._handle))


@pytest.fixture
def fake_remote():
    return FakeRemote
