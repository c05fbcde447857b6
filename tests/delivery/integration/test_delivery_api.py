"""Integration tests for the Delivery service HTTP surface."""

import pytest
from delivery.outbox import OutboxMessage
from fastapi.testclient import TestClient
from protean import current_domain
from shared.web import create_app

ADMIN = {"X-User-Id": "admin-1", "X-User-Email": "ops@example.com", "X-User-Roles": "DELIVERY_ADMIN"}


@pytest.fixture()
def client(ordering_bed, order_service, user_service):
    order_service.respond("/orders/ord-100", body={"order_id": "ord-100", "user_id": "user-1"})
    user_service.respond("/users/user-1", body={"id": "user-1", "email": "jane@example.com"})
    return TestClient(create_app())


def _create(client, order_id="ord-100", headers=ADMIN):
    return client.post("/deliveries", json={"order_id": order_id, "user_id": "user-1"}, headers=headers)


def _patch(client, delivery_id, status, headers=ADMIN):
    return client.patch(f"/deliveries/{delivery_id}/status", json={"status": status}, headers=headers)


class TestCreateDeliveryEndpoint:
    def test_returns_201(self, client):
        response = _create(client)
        assert response.status_code == 201
        assert "delivery_id" in response.json()

    def test_explicit_expected_date(self, client):
        response = client.post(
            "/deliveries",
            json={"order_id": "ord-100", "user_id": "user-1", "expected_delivery_date": "2031-03-01"},
            headers=ADMIN,
        )
        delivery_id = response.json()["delivery_id"]
        assert client.get(f"/deliveries/{delivery_id}").json()["expected_delivery_date"] == "2031-03-01"

    def test_unknown_order_is_404(self, client):
        response = _create(client, order_id="ord-404")
        assert response.status_code == 404
        assert response.json()["error"] == "order_not_found"
        assert current_domain.repository_for(OutboxMessage)._dao.query.all().items == []

    def test_order_service_down_is_503(self, client, order_service):
        order_service.respond("/orders/ord-100", status=500, body={"error": "boom"})
        response = _create(client)
        assert response.status_code == 503
        assert response.json()["error"] == "order_service_unavailable"

    def test_anonymous_caller_rejected(self, client):
        assert _create(client, headers={}).status_code == 401


class TestGetDeliveryEndpoint:
    def test_get_delivery(self, client):
        delivery_id = _create(client).json()["delivery_id"]
        response = client.get(f"/deliveries/{delivery_id}")
        assert response.status_code == 200
        assert response.json()["status"] == "PENDING"
        assert response.json()["order_id"] == "ord-100"

    def test_unknown_delivery_is_404(self, client):
        response = client.get("/deliveries/dl-missing")
        assert response.status_code == 404
        assert response.json()["error"] == "delivery_not_found"

    def test_list_deliveries(self, client):
        _create(client)
        assert len(client.get("/deliveries").json()) == 1

    def test_order_read_through(self, client):
        delivery_id = _create(client).json()["delivery_id"]
        response = client.get(f"/deliveries/{delivery_id}/order")
        assert response.status_code == 200
        assert response.json()["order_id"] == "ord-100"


class TestUpdateStatusEndpoint:
    def test_legal_transition(self, client):
        delivery_id = _create(client).json()["delivery_id"]
        response = _patch(client, delivery_id, "SHIPPED")
        assert response.status_code == 200
        assert response.json()["status"] == "SHIPPED"

    def test_illegal_transition_is_409(self, client):
        delivery_id = _create(client).json()["delivery_id"]
        response = _patch(client, delivery_id, "DELIVERED")
        assert response.status_code == 409
        assert response.json() == {
            "error": "illegal_transition",
            "detail": "Cannot transition from PENDING to DELIVERED. Allowed: CANCELLED, SHIPPED",
        }

    def test_terminal_delivery_is_409(self, client):
        delivery_id = _create(client).json()["delivery_id"]
        _patch(client, delivery_id, "SHIPPED")
        _patch(client, delivery_id, "DELIVERED")
        response = _patch(client, delivery_id, "CANCELLED")
        assert response.status_code == 409
        assert "already completed" in response.json()["detail"]

    def test_unknown_delivery_is_404(self, client):
        assert _patch(client, "dl-missing", "SHIPPED").status_code == 404
