"""FastAPI application for the order endpoints."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from restaurant_order_service.models.order_models import (
    Order,
    OrderInput,
    WaiterUpdate,
    parse_order_id,
)
from restaurant_order_service.services.errors import (
    OrderNotFoundError,
    OrderServiceError,
    OrderValidationError,
    StoreError,
)
from restaurant_order_service.services.order_service import OrderService

logger = logging.getLogger(__name__)

BodyT = TypeVar("BodyT", bound=BaseModel)

ORDER_DELETED_MESSAGE = "Order successfully deleted."


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class OrderResponse(BaseModel):
    """Envelope wrapping every order response except the full listing."""

    status: int
    message: str
    data: dict[str, Any]


def envelope(status_code: int, payload: Any) -> JSONResponse:
    """Wrap a payload in the order response envelope.

    Args:
        status_code: HTTP status, repeated in the body
        payload: Value placed under data.data

    Returns:
        JSONResponse carrying the envelope
    """
    body = OrderResponse(
        status=status_code,
        message="success" if status_code < 400 else "error",
        data={"data": jsonable_encoder(payload)},
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


def json_body(model: type[BodyT]) -> Callable[[Request], Awaitable[BodyT]]:
    """Build a dependency that parses and validates the raw request body.

    Parsing and validation happen in one step so both malformed JSON and
    missing or mistyped fields end up as OrderValidationError.

    Args:
        model: Pydantic model describing the body

    Returns:
        FastAPI dependency returning the validated model
    """

    async def parse(request: Request) -> BodyT:
        raw = await request.body()
        try:
            return model.model_validate_json(raw, strict=True)
        except ValidationError as e:
            raise OrderValidationError(str(e)) from e

    return parse


def _error_handler(status_code: int) -> Callable[[Request, Exception], Awaitable[JSONResponse]]:
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        message = exc.message if isinstance(exc, OrderServiceError) else str(exc)
        logger.warning(f"{request.method} {request.url.path} failed with {status_code}: {message}")
        return envelope(status_code, message)

    return handle


def create_app(order_service: OrderService) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        order_service: Service running order operations against the store

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Restaurant Order Service API",
        description="Create, read, update and delete restaurant orders",
        version="1.0.0",
    )

    app.state.order_service = order_service

    app.add_exception_handler(OrderValidationError, _error_handler(400))
    app.add_exception_handler(StoreError, _error_handler(500))
    app.add_exception_handler(OrderNotFoundError, _error_handler(404))

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.post("/order/create", tags=["Orders"])
    async def create_order(order: OrderInput = Depends(json_body(OrderInput))) -> JSONResponse:
        """Create an order from the request body.

        Store failures on this path are reported as 400 rather than 500.
        """
        try:
            result = await app.state.order_service.create_order(order)
        except StoreError as e:
            logger.warning(f"Order create failed: {e.message}")
            return envelope(400, e.message)

        return envelope(200, result.model_dump(by_alias=True))

    @app.get("/orders", response_model=list[Order], tags=["Orders"])
    async def get_all_orders() -> list[Order]:
        """List every order.

        Returns a bare array, not the response envelope.
        """
        orders: list[Order] = await app.state.order_service.list_orders()
        return orders

    @app.get("/order/{order_id}", tags=["Orders"])
    async def get_order(order_id: str) -> JSONResponse:
        """Fetch one order by id."""
        order = await app.state.order_service.get_order(parse_order_id(order_id))
        return envelope(200, order)

    @app.get("/waiter/{waiter}", tags=["Waiters"])
    async def get_orders_by_waiter(waiter: str) -> JSONResponse:
        """List the orders served by a waiter."""
        orders = await app.state.order_service.get_orders_by_waiter(waiter)
        return envelope(200, orders)

    @app.put("/waiter/update/{order_id}", tags=["Waiters"])
    async def update_waiter(
        order_id: str,
        update: WaiterUpdate = Depends(json_body(WaiterUpdate)),
    ) -> JSONResponse:
        """Reassign an order to another waiter."""
        order = await app.state.order_service.update_waiter(parse_order_id(order_id), update)
        return envelope(200, order)

    @app.put("/order/update/{order_id}", tags=["Orders"])
    async def update_order(
        order_id: str,
        order: OrderInput = Depends(json_body(OrderInput)),
    ) -> JSONResponse:
        """Replace dish, price, server and table of an order."""
        updated = await app.state.order_service.replace_order(parse_order_id(order_id), order)
        return envelope(200, updated)

    @app.delete("/order/delete/{order_id}", tags=["Orders"])
    async def delete_order(order_id: str) -> JSONResponse:
        """Delete an order by id."""
        await app.state.order_service.delete_order(parse_order_id(order_id))
        return envelope(200, ORDER_DELETED_MESSAGE)

    return app
