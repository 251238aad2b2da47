"""
AWS Lambda entrypoint for the repository details service

Direct invocations carry an `operation` key and are answered without the HTTP
layer; anything else (API Gateway / function URL events) is handed to the
FastAPI app through Mangum.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

from app.github.errors import NotFoundError, UpstreamError
from app.services.repositories import RepositoryQueryService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

OPERATION_REPOSITORIES = "repositories"
OPERATION_REPO_DETAILS = "repo_details"


async def _dispatch(operation: str, event: Dict[str, Any]) -> Any:
    # one service per invocation: asyncio.run gives every call a fresh loop
    service = RepositoryQueryService()
    try:
        if operation == OPERATION_REPOSITORIES:
            repositories = await service.repositories()
            return [repo.to_dict() for repo in repositories]

        if operation == OPERATION_REPO_DETAILS:
            owner = event.get("owner")
            name = event.get("name")
            if not owner or not name:
                raise ValueError("repo_details requires 'owner' and 'name'")
            detail = await service.repo_details(owner, name)
            return detail.to_dict()

        raise ValueError(f"Unknown operation: {operation}")
    finally:
        await service.aclose()


def lambda_handler(event: Optional[Dict[str, Any]], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda entrypoint.

    Expected direct-invocation payloads:
    - {"operation": "repositories"}
    - {"operation": "repo_details", "owner": "octocat", "name": "hello-world"}

    Returns:
        Dictionary with statusCode, operation, and result or error
    """
    event = event or {}
    if not isinstance(event, dict):
        logger.error(f"Invalid Lambda event type: {type(event).__name__}")
        return {
            "statusCode": 400,
            "operation": None,
            "error": "Lambda event must be a JSON object",
        }

    operation = event.get("operation")

    if operation is None:
        from mangum import Mangum
        from app.main import app

        handler = Mangum(app, lifespan="off")
        return handler(event, context)

    logger.info(f"Lambda invoked with operation: {operation}")

    try:
        result = asyncio.run(_dispatch(operation, event))
        return {
            "statusCode": 200,
            "operation": operation,
            "result": result,
        }

    except ValueError as e:
        logger.error(f"Invalid Lambda event: {e}")
        return {
            "statusCode": 400,
            "operation": operation,
            "error": str(e),
        }

    except NotFoundError as e:
        return {
            "statusCode": 404,
            "operation": operation,
            "error": str(e),
            "result": None,
        }

    except UpstreamError as e:
        logger.error(f"Lambda execution failed: {e}", exc_info=True)
        return {
            "statusCode": 502,
            "operation": operation,
            "error": str(e),
        }

    except Exception as e:
        logger.error(f"Lambda execution failed: {e}", exc_info=True)
        return {
            "statusCode": 500,
            "operation": operation,
            "error": str(e),
        }


# Allow local testing via `python -m app.handler`
if __name__ == "__main__":
    print("=" * 60)
    print("Repo Details Service - Local Test")
    print("=" * 60)

    test_event = {"operation": OPERATION_REPOSITORIES}
    print(f"\nTesting with event: {test_event}")
    print("-" * 60)

    result = lambda_handler(test_event, None)

    print("\nResult:")
    print(result)
    print("=" * 60)
