from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.dependencies.rate_limits import setup_rate_limiter
from api.router import api_router
from infrastructure.logging import bind_request_context, get_correlation_id
from infrastructure.services import get_settings
from server.lifespan import lifespan

CORRELATION_ID_HEADER = "X-Correlation-ID"


async def correlation_id_middleware(request: Request, call_next):
    """Bind a correlation id to every log emitted while handling the request."""
    with bind_request_context(
        correlation_id=request.headers.get(CORRELATION_ID_HEADER),
        request_path=request.url.path,
        request_method=request.method,
    ):
        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = get_correlation_id() or ""
        return response


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(title="Club notifications", lifespan=lifespan)
    setup_rate_limiter(app)

    allow_origins = settings.server.CORS_ALLOW_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials="*" not in allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(correlation_id_middleware)

    app.include_router(api_router)
    return app


handler = create_app()
