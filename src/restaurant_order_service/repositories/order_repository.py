"""DynamoDB repository for orders.

The repository provides the document store operations the order service needs:
insert-one, find-with-filter, find-one-by-id, update-one, replace-one and
delete-one. Unlike lookups that can simply miss, every failure here has to
reach the client with its underlying message, so ClientErrors and numbers
boto3 refuses to serialize are logged and re-raised as StoreError.
"""

import logging
from collections.abc import Generator
from decimal import DecimalException
from typing import Any

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table
from pydantic import ValidationError

from restaurant_order_service.models.order_models import (
    InsertResult,
    Order,
    OrderInput,
    new_order_id,
)
from restaurant_order_service.services.errors import StoreError

logger = logging.getLogger(__name__)

NO_DOCUMENTS_MESSAGE = "no documents in result"

_ID_EXISTS = {
    "ConditionExpression": "attribute_exists(#id)",
    "ExpressionAttributeNames": {"#id": "id"},
}


def _is_condition_failure(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


class OrderRepository:
    """Repository for order CRUD operations.

    Manages order documents in DynamoDB with id as partition key.
    """

    def __init__(self, dynamodb_resource: DynamoDBServiceResource, table_name: str) -> None:
        """Initialize repository.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the DynamoDB table
        """
        self.dynamodb = dynamodb_resource
        self.table_name = table_name
        self.table: Table = dynamodb_resource.Table(table_name)

    def insert_one(self, order: OrderInput) -> InsertResult:
        """Insert a new order under a freshly generated id.

        Args:
            order: Validated order fields

        Returns:
            InsertResult: Acknowledgment holding the generated id

        Raises:
            StoreError: If the write fails
        """
        new_order = Order(id=new_order_id(), **order.model_dump())

        try:
            self.table.put_item(
                Item=new_order.to_dynamodb_item(),
                ConditionExpression="attribute_not_exists(#id)",
                ExpressionAttributeNames={"#id": "id"},
            )
        except (ClientError, BotoCoreError, TypeError, DecimalException) as e:
            logger.error(f"Failed to insert order: {e}")
            raise StoreError(str(e)) from e

        return InsertResult(inserted_id=new_order.id)

    def find(self, server: str | None = None) -> Generator[Order, None, None]:
        """Lazily iterate over stored orders.

        Pages are scanned on demand. Close the returned generator once done
        with it, including when iteration stops early.

        Args:
            server: Only yield orders served by this waiter (exact match)

        Returns:
            Generator yielding decoded orders in scan order
        """
        scan_kwargs: dict[str, Any] = {}
        if server is not None:
            scan_kwargs["FilterExpression"] = Attr("server").eq(server)

        return self._scan(scan_kwargs)

    def _scan(self, scan_kwargs: dict[str, Any]) -> Generator[Order, None, None]:
        try:
            while True:
                try:
                    response = self.table.scan(**scan_kwargs)
                except (ClientError, BotoCoreError) as e:
                    logger.error(f"Failed to scan orders: {e}")
                    raise StoreError(str(e)) from e

                for item in response.get("Items", []):
                    yield self._decode(item)

                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return
                scan_kwargs = {**scan_kwargs, "ExclusiveStartKey": last_key}
        finally:
            logger.debug(f"Order cursor on {self.table_name} closed")

    def find_one(self, order_id: str) -> Order:
        """Retrieve an order by id.

        Args:
            order_id: Order identifier

        Returns:
            Order: The stored order

        Raises:
            StoreError: If the lookup fails or no order has this id
        """
        try:
            response = self.table.get_item(Key={"id": order_id})
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to get order: {e}")
            raise StoreError(str(e)) from e

        if "Item" not in response:
            raise StoreError(NO_DOCUMENTS_MESSAGE)

        return self._decode(response["Item"])

    def update_server(self, order_id: str, server: str | None) -> int:
        """Set the waiter of an order.

        A missing server leaves the document untouched; the match is still reported.

        Args:
            order_id: Order identifier
            server: New waiter name

        Returns:
            int: Number of matched orders (0 or 1)

        Raises:
            StoreError: If the update fails
        """
        if server is None:
            return 1 if self._exists(order_id) else 0

        try:
            self.table.update_item(
                Key={"id": order_id},
                UpdateExpression="SET #server = :server",
                ConditionExpression="attribute_exists(#id)",
                ExpressionAttributeNames={"#id": "id", "#server": "server"},
                ExpressionAttributeValues={":server": server},
            )
        except ClientError as e:
            if _is_condition_failure(e):
                return 0
            logger.error(f"Failed to update order server: {e}")
            raise StoreError(str(e)) from e
        except BotoCoreError as e:
            logger.error(f"Failed to update order server: {e}")
            raise StoreError(str(e)) from e

        return 1

    def replace_one(self, order_id: str, order: OrderInput) -> int:
        """Overwrite all fields of an existing order, keeping its id.

        Args:
            order_id: Order identifier
            order: Replacement fields

        Returns:
            int: Number of matched orders (0 or 1)

        Raises:
            StoreError: If the write fails
        """
        replacement = Order(id=order_id, **order.model_dump())

        try:
            self.table.put_item(Item=replacement.to_dynamodb_item(), **_ID_EXISTS)
        except ClientError as e:
            if _is_condition_failure(e):
                return 0
            logger.error(f"Failed to replace order: {e}")
            raise StoreError(str(e)) from e
        except (BotoCoreError, TypeError, DecimalException) as e:
            logger.error(f"Failed to replace order: {e}")
            raise StoreError(str(e)) from e

        return 1

    def delete_one(self, order_id: str) -> int:
        """Delete an order.

        Args:
            order_id: Order identifier

        Returns:
            int: Number of deleted orders (0 or 1)

        Raises:
            StoreError: If the delete fails
        """
        try:
            response = self.table.delete_item(Key={"id": order_id}, ReturnValues="ALL_OLD")
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete order: {e}")
            raise StoreError(str(e)) from e

        return 1 if response.get("Attributes") else 0

    def _exists(self, order_id: str) -> bool:
        try:
            response = self.table.get_item(
                Key={"id": order_id},
                ProjectionExpression="#id",
                ExpressionAttributeNames={"#id": "id"},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to check order existence: {e}")
            raise StoreError(str(e)) from e

        return "Item" in response

    def _decode(self, item: dict[str, Any]) -> Order:
        try:
            return Order.from_dynamodb_item(item)
        except ValidationError as e:
            logger.error(f"Failed to decode order {item.get('id')}: {e}")
            raise StoreError(str(e)) from e
