"""AWS Lambda handler for API Gateway requests.

API Gateway events are passed to the FastAPI application through the Mangum
ASGI adapter. The application is created when `main` is imported during the
cold start and reused across warm invocations.
"""

import logging
import os
from typing import Any

from mangum import Mangum

from main import app

logger = logging.getLogger(__name__)

# Wrap the FastAPI app (skip in test mode, where main.app is a placeholder)
if os.getenv("ENVIRONMENT") != "test":
    mangum_handler = Mangum(app, lifespan="off")
else:
    mangum_handler = None  # type: ignore


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point for API Gateway requests.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        API Gateway response dict
    """
    logger.info(f"Received Lambda invocation, request_id: {context.aws_request_id}")

    try:
        result: dict[str, Any] = mangum_handler(event, context)
        return result
    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {
            "statusCode": 500,
            "body": f"Internal server error: {str(e)}",
        }
