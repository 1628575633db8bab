"""Order service for running order operations against the store."""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable, Generator
from contextlib import asynccontextmanager, closing
from typing import Any, TypeVar

from restaurant_order_service.models.order_models import (
    InsertResult,
    Order,
    OrderInput,
    WaiterUpdate,
)
from restaurant_order_service.observability.decorators import traced
from restaurant_order_service.observability.metrics import record_store_call, record_store_failure
from restaurant_order_service.repositories.order_repository import OrderRepository
from restaurant_order_service.services.errors import OrderNotFoundError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 10.0


def _drain(cursor: Generator[Order, None, None]) -> list[Order]:
    with closing(cursor):
        return list(cursor)


class OrderService:
    """Service for order create/read/update/delete operations.

    Each operation runs its store calls under a single deadline that starts
    when the operation starts. Blocking boto3 calls are moved off the event
    loop. Store failures, including an expired deadline, surface as StoreError
    and are never retried.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for storing orders
            timeout_seconds: Deadline for the store calls of one operation
        """
        self.order_repository = order_repository
        self.timeout_seconds = timeout_seconds

    @asynccontextmanager
    async def _deadline(self) -> AsyncIterator[None]:
        try:
            async with asyncio.timeout(self.timeout_seconds):
                yield
        except TimeoutError as e:
            logger.warning(f"Order store deadline of {self.timeout_seconds}s exceeded")
            raise StoreError(
                f"store operation exceeded deadline of {self.timeout_seconds}s"
            ) from e

    async def _call(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        start = time.perf_counter()
        try:
            return await asyncio.to_thread(func, *args)
        except StoreError:
            record_store_failure(operation, "StoreError")
            raise
        except asyncio.CancelledError:
            record_store_failure(operation, "Timeout")
            raise
        finally:
            record_store_call(operation, time.perf_counter() - start)

    @traced("create_order", service_name="order-svc")
    async def create_order(self, order: OrderInput) -> InsertResult:
        """Persist a new order.

        Args:
            order: Validated order fields

        Returns:
            InsertResult holding the generated id
        """
        async with self._deadline():
            result = await self._call("insert_one", self.order_repository.insert_one, order)

        logger.info(f"Created order {result.inserted_id}")
        return result

    @traced("list_orders", service_name="order-svc")
    async def list_orders(self) -> list[Order]:
        """Return every stored order in store iteration order."""
        async with self._deadline():
            return await self._call("find", _drain, self.order_repository.find())

    @traced("get_order", service_name="order-svc")
    async def get_order(self, order_id: str) -> Order:
        """Return the order with the given id.

        Raises:
            StoreError: If the lookup fails or nothing matches
        """
        async with self._deadline():
            return await self._call("find_one", self.order_repository.find_one, order_id)

    @traced("get_orders_by_waiter", service_name="order-svc")
    async def get_orders_by_waiter(self, waiter: str) -> list[Order]:
        """Return the orders whose server is exactly the given waiter."""
        async with self._deadline():
            return await self._call("find", _drain, self.order_repository.find(waiter))

    @traced("update_waiter", service_name="order-svc")
    async def update_waiter(self, order_id: str, update: WaiterUpdate) -> Order:
        """Reassign an order to another waiter.

        Args:
            order_id: Order identifier
            update: New waiter

        Returns:
            The order as stored after the update, or Order.zero() if no order matched
        """
        async with self._deadline():
            matched = await self._call(
                "update_one", self.order_repository.update_server, order_id, update.server
            )
            if matched == 1:
                return await self._call("find_one", self.order_repository.find_one, order_id)

        logger.info(f"Waiter update matched no order for id {order_id}")
        return Order.zero()

    @traced("replace_order", service_name="order-svc")
    async def replace_order(self, order_id: str, order: OrderInput) -> Order:
        """Overwrite dish, price, server and table of an order.

        Args:
            order_id: Order identifier
            order: Replacement fields

        Returns:
            The order as stored after the replace, or Order.zero() if no order matched
        """
        async with self._deadline():
            matched = await self._call(
                "replace_one", self.order_repository.replace_one, order_id, order
            )
            if matched == 1:
                return await self._call("find_one", self.order_repository.find_one, order_id)

        logger.info(f"Order replace matched no order for id {order_id}")
        return Order.zero()

    @traced("delete_order", service_name="order-svc")
    async def delete_order(self, order_id: str) -> None:
        """Delete an order.

        Raises:
            OrderNotFoundError: If no order has this id
            StoreError: If the delete fails
        """
        async with self._deadline():
            deleted = await self._call("delete_one", self.order_repository.delete_one, order_id)

        if deleted < 1:
            raise OrderNotFoundError()

        logger.info(f"Deleted order {order_id}")
