"""ASGI entrypoint for the SSLCommerz bridge.

`app` is served by uvicorn locally and `handler` by AWS Lambda behind API
Gateway. Both the callback routes and checkout live under /api.
"""

import os
from datetime import UTC, datetime

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from bridge_api.exceptions import register_exception_handlers
from bridge_api.middleware.correlation import CorrelationIdMiddleware
from bridge_api.routes.callbacks import router as callbacks_router
from bridge_api.routes.payments import router as payments_router
from sslcommerz_bridge import __version__
from sslcommerz_bridge.utils.logging import configure_logging

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"

health_router = APIRouter(tags=["health"])


@health_router.get("/ping")
async def ping() -> dict[str, str]:
    """Liveness probe; touches no AWS resources."""
    return {
        "status": "ok",
        "service": "sslcommerz-bridge",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def _cors_origins() -> list[str]:
    raw = os.environ.get("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware, handlers and routes."""
    configure_logging()

    application = FastAPI(
        title="SSLCommerz Bridge API",
        description="Payment callbacks and checkout for Tutor orders paid through SSLCommerz",
        version=__version__,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    # Added last so it wraps CORS and every response carries the header
    application.add_middleware(CorrelationIdMiddleware)
    register_exception_handlers(application)

    for router in (health_router, callbacks_router, payments_router):
        application.include_router(router, prefix="/api")
    return application


app = create_app()

handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Serve the API with uvicorn for local development."""
    import uvicorn

    if reload:
        uvicorn.run("bridge_api.main:app", host=host, port=port, reload=True, reload_dirs=["src"])
    else:
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
