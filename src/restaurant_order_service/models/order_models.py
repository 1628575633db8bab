"""Order data models.

These models represent the single order resource, the request bodies accepted
by the API, and the DynamoDB item format used by the order repository.
"""

import uuid
from decimal import Decimal, DecimalException
from typing import Any

from boto3.dynamodb.types import DYNAMODB_CONTEXT
from pydantic import BaseModel, ConfigDict, Field, field_validator

NIL_ORDER_ID = "0" * 32


def new_order_id() -> str:
    """Generate a new order identifier.

    Returns:
        str: 32 character lowercase hex identifier
    """
    return uuid.uuid4().hex


def parse_order_id(raw: str) -> str:
    """Parse an order identifier from its text form.

    Unparseable values map to NIL_ORDER_ID, which never matches a stored order.

    Args:
        raw: Identifier as received in the request path

    Returns:
        str: Canonical identifier
    """
    try:
        return uuid.UUID(raw).hex
    except ValueError:
        return NIL_ORDER_ID


class OrderInput(BaseModel):
    """Request body for creating or fully replacing an order."""

    dish: str = Field(..., description="Name of the ordered dish", min_length=1)
    price: float = Field(..., description="Price of the dish", allow_inf_nan=False)
    server: str = Field(..., description="Waiter serving the table", min_length=1)
    table: int = Field(..., description="Table identifier")

    @field_validator("price", "table")
    @classmethod
    def fits_dynamodb_number(cls, value: float | int) -> float | int:
        """Reject numbers DynamoDB cannot store exactly, such as 1e200 or more than 38 digits."""
        try:
            DYNAMODB_CONTEXT.create_decimal(str(value))
        except DecimalException as e:
            raise ValueError("number is out of the range the order store accepts") from e
        return value


class WaiterUpdate(BaseModel):
    """Request body for reassigning an order to another waiter."""

    server: str | None = Field(None, description="New waiter name", min_length=1)


class Order(OrderInput):
    """Persisted order.

    Stored in DynamoDB with id as partition key.
    """

    id: str = Field(..., description="Unique order identifier")

    @classmethod
    def zero(cls) -> "Order":
        """Build the empty order returned when an update matched nothing."""
        return cls.model_construct(id=NIL_ORDER_ID, dish="", price=0.0, server="", table=0)

    def to_dynamodb_item(self) -> dict[str, Any]:
        """Convert to DynamoDB item format.

        Returns:
            dict: DynamoDB-compatible representation
        """
        return {
            "id": self.id,
            "dish": self.dish,
            "price": Decimal(str(self.price)),
            "server": self.server,
            "table": self.table,
        }

    @classmethod
    def from_dynamodb_item(cls, item: dict[str, Any]) -> "Order":
        """Create Order from DynamoDB item.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Order: Parsed model instance

        Raises:
            pydantic.ValidationError: If the item is missing fields or holds bad values
        """
        # boto3 deserializes every number as Decimal
        data = dict(item)
        if isinstance(data.get("price"), Decimal):
            data["price"] = float(data["price"])
        table = data.get("table")
        if isinstance(table, Decimal) and table == table.to_integral_value():
            data["table"] = int(table)
        return cls.model_validate(data)


class InsertResult(BaseModel):
    """Acknowledgment returned by the store for an inserted order."""

    model_config = ConfigDict(populate_by_name=True)

    inserted_id: str = Field(..., alias="InsertedID")
