"""AWS Lambda handler serving the storefront API behind API Gateway.

Requests are translated to ASGI calls on the FastAPI app through Mangum.
"""

import logging
import os
from typing import Any

from mangum import Mangum

from lambda_dependencies import get_fastapi_app, initialize_lambda_environment

logger = logging.getLogger(__name__)

# Initialize during cold start; the app and adapter are reused on warm starts
if os.getenv("ENVIRONMENT") != "test":
    initialize_lambda_environment()
    mangum_handler = Mangum(get_fastapi_app(), lifespan="off")
else:
    mangum_handler = None  # type: ignore


def is_http_event(event: dict[str, Any]) -> bool:
    """Determine whether the event came from API Gateway (REST or HTTP API).

    Args:
        event: The Lambda event payload

    Returns:
        True if this looks like an API Gateway request
    """
    return "requestContext" in event and ("httpMethod" in event or "routeKey" in event)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        Response dict with statusCode and body
    """
    logger.info(f"Received Lambda invocation, request_id: {getattr(context, 'aws_request_id', None)}")

    if not is_http_event(event):
        logger.warning("Unsupported event received, expected an API Gateway request")
        return {"statusCode": 400, "body": '{"message": "Unsupported event type"}'}

    try:
        result: dict[str, Any] = mangum_handler(event, context)
        return result
    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {"statusCode": 500, "body": '{"message": "Internal server error"}'}
