"""Error kinds raised while serving order requests.

Each error carries the message returned to the client verbatim.
"""

ORDER_NOT_FOUND_MESSAGE = "Order with specified ID not found."


class OrderServiceError(Exception):
    """Base class for errors that terminate an order request."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OrderValidationError(OrderServiceError):
    """Request body could not be parsed or failed field validation."""


class StoreError(OrderServiceError):
    """A store call failed, timed out, or returned an undecodable document."""


class OrderNotFoundError(OrderServiceError):
    """Delete matched no order."""

    def __init__(self, message: str = ORDER_NOT_FOUND_MESSAGE) -> None:
        super().__init__(message)
