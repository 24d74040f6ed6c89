from typing import Optional

from fastapi import FastAPI
from fastapi.testclient import TestClient


def create_test_app(routers, middlewares=None, prefix: str = "") -> FastAPI:
    """
    Create a FastAPI test application with the given router and middlewares.

    Args:
        routers: The router (or list of routers) to include in the app.
        middlewares: Optional list of (middleware_class, config_dict) tuples.
        prefix: Optional path prefix for every router (e.g. "/api/v1").

    Returns:
        FastAPI: A configured FastAPI application.

    Example:
        app = create_test_app([router1, router2], middlewares=[(MiddlewareClass, config_dict)])
    """
    # Create a fresh app
    app = FastAPI()

    # Setup rate limiting
    from api.dependencies.rate_limits import setup_rate_limiter

    setup_rate_limiter(app)

    # Add any additional middlewares
    if middlewares:
        for middleware_class, middleware_config in middlewares:
            app.add_middleware(middleware_class, **middleware_config)

    # Include the router
    if not isinstance(routers, list):
        routers = [routers]
    for router in routers:
        app.include_router(router, prefix=prefix)

    return app


def rate_limiting_helper(
    client: TestClient,
    endpoint: str,
    request_limit: int,
    method: str = "get",
    expected_status: int = 200,
    json: Optional[dict] = None,
):
    """
    Helper function to test rate limiting for an endpoint.

    Args:
        client: TestClient wrapping the app under test.
        endpoint: The endpoint to test.
        request_limit: Number of requests allowed before rate limiting.
        method: HTTP method to use (e.g., "get", "post").
        expected_status: Expected status code for successful requests.
        json: Optional JSON body sent with every request.
    """
    http_method = getattr(client, method.lower())
    kwargs = {"json": json} if json is not None else {}

    # Make requests up to the limit
    for i in range(request_limit):
        response = http_method(endpoint, **kwargs)
        assert (
            response.status_code == expected_status
        ), f"Request {i+1} failed with status {response.status_code}"

    # The next request should be rate limited
    response = http_method(endpoint, **kwargs)
    assert response.status_code == 429, "Expected rate limiting to trigger"
    assert response.json() == {"message": "Rate limit exceeded"}
