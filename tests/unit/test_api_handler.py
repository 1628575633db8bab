"""Unit tests for the FastAPI order endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from restaurant_order_service.handlers.api_handler import create_app
from restaurant_order_service.models.order_models import (
    NIL_ORDER_ID,
    InsertResult,
    Order,
    OrderInput,
    WaiterUpdate,
)
from restaurant_order_service.services.errors import OrderNotFoundError, StoreError
from restaurant_order_service.services.order_service import OrderService


@pytest.fixture
def client() -> TestClient:
    """Create a test client with a mocked order service."""
    mock_order_service = MagicMock(spec=OrderService)
    app = create_app(order_service=mock_order_service)
    return TestClient(app)


@pytest.fixture
def stored_order(mock_order_id: str, mock_order_payload: dict) -> Order:
    """An order as returned by the service."""
    return Order(id=mock_order_id, **mock_order_payload)


@pytest.mark.unit
class TestHealthEndpoint:
    """Test suite for health check endpoint."""

    def test_health_check(self, client: TestClient) -> None:
        """Test health check endpoint returns 200."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


@pytest.mark.unit
class TestCreateOrderEndpoint:
    """Test suite for POST /order/create."""

    def test_create_order_success(
        self, client: TestClient, mock_order_payload: dict, mock_order_id: str
    ) -> None:
        """Test creating an order wraps the insert acknowledgment."""
        client.app.state.order_service.create_order = AsyncMock(
            return_value=InsertResult(inserted_id=mock_order_id)
        )

        response = client.post("/order/create", json=mock_order_payload)

        assert response.status_code == 200
        assert response.json() == {
            "status": 200,
            "message": "success",
            "data": {"data": {"InsertedID": mock_order_id}},
        }
        passed = client.app.state.order_service.create_order.call_args.args[0]
        assert passed == OrderInput(**mock_order_payload)

    def test_create_order_ignores_client_id(
        self, client: TestClient, mock_order_payload: dict, mock_order_id: str
    ) -> None:
        """Test that a client supplied id never reaches the service."""
        client.app.state.order_service.create_order = AsyncMock(
            return_value=InsertResult(inserted_id=mock_order_id)
        )

        response = client.post("/order/create", json={**mock_order_payload, "id": "mine"})

        assert response.status_code == 200
        passed = client.app.state.order_service.create_order.call_args.args[0]
        assert not hasattr(passed, "id")

    @pytest.mark.parametrize("missing", ["dish", "price", "server", "table"])
    def test_create_order_missing_field(
        self, client: TestClient, mock_order_payload: dict, missing: str
    ) -> None:
        """Test that a missing field is rejected before the store is called."""
        client.app.state.order_service.create_order = AsyncMock()
        del mock_order_payload[missing]

        response = client.post("/order/create", json=mock_order_payload)

        assert response.status_code == 400
        data = response.json()
        assert data["status"] == 400
        assert data["message"] == "error"
        assert missing in data["data"]["data"]
        client.app.state.order_service.create_order.assert_not_called()

    def test_create_order_malformed_json(self, client: TestClient) -> None:
        """Test that a body that is not JSON is rejected with 400."""
        client.app.state.order_service.create_order = AsyncMock()

        response = client.post(
            "/order/create",
            content=b'{"dish": "Soup",',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "error"
        client.app.state.order_service.create_order.assert_not_called()

    def test_create_order_wrong_type(self, client: TestClient, mock_order_payload: dict) -> None:
        """Test that a mistyped field is rejected with 400."""
        client.app.state.order_service.create_order = AsyncMock()

        response = client.post("/order/create", json={**mock_order_payload, "price": "cheap"})

        assert response.status_code == 400
        assert "price" in response.json()["data"]["data"]

    @pytest.mark.parametrize(
        "body",
        [
            '{"dish": "Soup", "price": 1e200, "server": "Alice", "table": 3}',
            '{"dish": "Soup", "price": 1e-200, "server": "Alice", "table": 3}',
            '{"dish": "Soup", "price": NaN, "server": "Alice", "table": 3}',
            '{"dish": "Soup", "price": 9.5, "server": "Alice", "table": ' + "1" * 42 + "}",
        ],
    )
    def test_create_order_number_out_of_store_range(self, client: TestClient, body: str) -> None:
        """Test that numbers DynamoDB cannot hold are a 400 before any store call."""
        client.app.state.order_service.create_order = AsyncMock()

        response = client.post(
            "/order/create", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["status"] == 400
        assert response.json()["message"] == "error"
        client.app.state.order_service.create_order.assert_not_called()

    def test_create_order_store_error_is_400(
        self, client: TestClient, mock_order_payload: dict
    ) -> None:
        """Test that store failures on create are reported as 400."""
        client.app.state.order_service.create_order = AsyncMock(
            side_effect=StoreError("write failed")
        )

        response = client.post("/order/create", json=mock_order_payload)

        assert response.status_code == 400
        assert response.json() == {
            "status": 400,
            "message": "error",
            "data": {"data": "write failed"},
        }


@pytest.mark.unit
class TestReadEndpoints:
    """Test suite for the read endpoints."""

    def test_get_all_orders_returns_bare_array(
        self, client: TestClient, stored_order: Order
    ) -> None:
        """Test listing returns an array without the envelope."""
        client.app.state.order_service.list_orders = AsyncMock(return_value=[stored_order])

        response = client.get("/orders")

        assert response.status_code == 200
        assert response.json() == [stored_order.model_dump()]

    def test_get_all_orders_empty(self, client: TestClient) -> None:
        """Test listing with no orders returns an empty array."""
        client.app.state.order_service.list_orders = AsyncMock(return_value=[])

        response = client.get("/orders")

        assert response.status_code == 200
        assert response.json() == []

    def test_get_all_orders_store_error(self, client: TestClient) -> None:
        """Test that listing failures are enveloped 500 errors."""
        client.app.state.order_service.list_orders = AsyncMock(
            side_effect=StoreError("cannot decode order")
        )

        response = client.get("/orders")

        assert response.status_code == 500
        assert response.json() == {
            "status": 500,
            "message": "error",
            "data": {"data": "cannot decode order"},
        }

    def test_get_order_success(
        self, client: TestClient, stored_order: Order, mock_order_id: str
    ) -> None:
        """Test fetching a single order."""
        client.app.state.order_service.get_order = AsyncMock(return_value=stored_order)

        response = client.get(f"/order/{mock_order_id}")

        assert response.status_code == 200
        assert response.json() == {
            "status": 200,
            "message": "success",
            "data": {"data": stored_order.model_dump()},
        }
        client.app.state.order_service.get_order.assert_called_once_with(mock_order_id)

    def test_get_order_malformed_id_uses_nil_id(self, client: TestClient) -> None:
        """Test that an unparseable id is passed on as the all-zero id."""
        client.app.state.order_service.get_order = AsyncMock(
            side_effect=StoreError("no documents in result")
        )

        response = client.get("/order/not-an-id")

        assert response.status_code == 500
        assert response.json()["data"]["data"] == "no documents in result"
        client.app.state.order_service.get_order.assert_called_once_with(NIL_ORDER_ID)

    def test_get_orders_by_waiter(self, client: TestClient, stored_order: Order) -> None:
        """Test filtering orders by waiter wraps the list in the envelope."""
        client.app.state.order_service.get_orders_by_waiter = AsyncMock(
            return_value=[stored_order]
        )

        response = client.get("/waiter/Alice")

        assert response.status_code == 200
        assert response.json()["data"]["data"] == [stored_order.model_dump()]
        client.app.state.order_service.get_orders_by_waiter.assert_called_once_with("Alice")

    def test_get_orders_by_waiter_url_decoded(self, client: TestClient) -> None:
        """Test that the waiter name is URL decoded."""
        client.app.state.order_service.get_orders_by_waiter = AsyncMock(return_value=[])

        response = client.get("/waiter/Mary%20Ann")

        assert response.status_code == 200
        assert response.json()["data"]["data"] == []
        client.app.state.order_service.get_orders_by_waiter.assert_called_once_with("Mary Ann")


@pytest.mark.unit
class TestUpdateEndpoints:
    """Test suite for the update endpoints."""

    def test_update_waiter_success(
        self, client: TestClient, stored_order: Order, mock_order_id: str
    ) -> None:
        """Test reassigning an order returns the updated order."""
        updated = stored_order.model_copy(update={"server": "Bob"})
        client.app.state.order_service.update_waiter = AsyncMock(return_value=updated)

        response = client.put(f"/waiter/update/{mock_order_id}", json={"server": "Bob"})

        assert response.status_code == 200
        assert response.json()["data"]["data"]["server"] == "Bob"
        client.app.state.order_service.update_waiter.assert_called_once_with(
            mock_order_id, WaiterUpdate(server="Bob")
        )

    def test_update_waiter_no_match(self, client: TestClient, mock_order_id: str) -> None:
        """Test that an unmatched update is still a success with the empty order."""
        client.app.state.order_service.update_waiter = AsyncMock(return_value=Order.zero())

        response = client.put(f"/waiter/update/{mock_order_id}", json={"server": "Bob"})

        assert response.status_code == 200
        assert response.json() == {
            "status": 200,
            "message": "success",
            "data": {
                "data": {"dish": "", "price": 0.0, "server": "", "table": 0, "id": NIL_ORDER_ID}
            },
        }

    def test_update_waiter_invalid_body(self, client: TestClient, mock_order_id: str) -> None:
        """Test that a mistyped server is rejected with 400."""
        client.app.state.order_service.update_waiter = AsyncMock()

        response = client.put(f"/waiter/update/{mock_order_id}", json={"server": 42})

        assert response.status_code == 400
        client.app.state.order_service.update_waiter.assert_not_called()

    def test_update_waiter_empty_server(self, client: TestClient, mock_order_id: str) -> None:
        """Test that an empty waiter name is rejected before any store call."""
        client.app.state.order_service.update_waiter = AsyncMock()

        response = client.put(f"/waiter/update/{mock_order_id}", json={"server": ""})

        assert response.status_code == 400
        assert "server" in response.json()["data"]["data"]
        client.app.state.order_service.update_waiter.assert_not_called()

    def test_update_waiter_store_error(self, client: TestClient, mock_order_id: str) -> None:
        """Test that update failures are reported as 500."""
        client.app.state.order_service.update_waiter = AsyncMock(
            side_effect=StoreError("update failed")
        )

        response = client.put(f"/waiter/update/{mock_order_id}", json={"server": "Bob"})

        assert response.status_code == 500
        assert response.json()["data"]["data"] == "update failed"

    def test_update_order_success(
        self,
        client: TestClient,
        stored_order: Order,
        mock_order_id: str,
        mock_order_payload: dict,
    ) -> None:
        """Test replacing an order returns the stored result."""
        client.app.state.order_service.replace_order = AsyncMock(return_value=stored_order)

        response = client.put(f"/order/update/{mock_order_id}", json=mock_order_payload)

        assert response.status_code == 200
        assert response.json()["data"]["data"] == stored_order.model_dump()
        client.app.state.order_service.replace_order.assert_called_once_with(
            mock_order_id, OrderInput(**mock_order_payload)
        )

    def test_update_order_missing_field(
        self, client: TestClient, mock_order_id: str, mock_order_payload: dict
    ) -> None:
        """Test that a partial body is rejected for a full replace."""
        client.app.state.order_service.replace_order = AsyncMock()
        del mock_order_payload["table"]

        response = client.put(f"/order/update/{mock_order_id}", json=mock_order_payload)

        assert response.status_code == 400
        client.app.state.order_service.replace_order.assert_not_called()

    def test_update_order_price_out_of_store_range(
        self, client: TestClient, mock_order_id: str
    ) -> None:
        """Test that an oversized price on replace is rejected with 400."""
        client.app.state.order_service.replace_order = AsyncMock()

        response = client.put(
            f"/order/update/{mock_order_id}",
            content='{"dish": "Soup", "price": 1e200, "server": "Alice", "table": 3}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "price" in response.json()["data"]["data"]
        client.app.state.order_service.replace_order.assert_not_called()

    def test_update_order_store_error(
        self, client: TestClient, mock_order_id: str, mock_order_payload: dict
    ) -> None:
        """Test that replace failures are reported as 500."""
        client.app.state.order_service.replace_order = AsyncMock(
            side_effect=StoreError("replace failed")
        )

        response = client.put(f"/order/update/{mock_order_id}", json=mock_order_payload)

        assert response.status_code == 500


@pytest.mark.unit
class TestDeleteEndpoint:
    """Test suite for DELETE /order/delete/{order_id}."""

    def test_delete_order_success(self, client: TestClient, mock_order_id: str) -> None:
        """Test deleting an order."""
        client.app.state.order_service.delete_order = AsyncMock(return_value=None)

        response = client.delete(f"/order/delete/{mock_order_id}")

        assert response.status_code == 200
        assert response.json() == {
            "status": 200,
            "message": "success",
            "data": {"data": "Order successfully deleted."},
        }

    def test_delete_order_not_found(self, client: TestClient, mock_order_id: str) -> None:
        """Test deleting a missing order returns 404."""
        client.app.state.order_service.delete_order = AsyncMock(side_effect=OrderNotFoundError())

        response = client.delete(f"/order/delete/{mock_order_id}")

        assert response.status_code == 404
        assert response.json() == {
            "status": 404,
            "message": "error",
            "data": {"data": "Order with specified ID not found."},
        }

    def test_delete_order_store_error(self, client: TestClient, mock_order_id: str) -> None:
        """Test that delete failures are reported as 500."""
        client.app.state.order_service.delete_order = AsyncMock(
            side_effect=StoreError("delete failed")
        )

        response = client.delete(f"/order/delete/{mock_order_id}")

        assert response.status_code == 500
        assert response.json()["data"]["data"] == "delete failed"
