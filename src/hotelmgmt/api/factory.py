"""FastAPI application factory."""

from fastapi import FastAPI, Request, Response

from hotelmgmt.observability.correlation import CORRELATION_ID_HEADER, correlation_scope
from hotelmgmt.observability.logging import configure_logging

from .routers import public
from .routes import auth, hotels, reservations


def create_app() -> FastAPI:
    """Create the FastAPI app with logging, correlation IDs and all routes."""
    configure_logging()

    app = FastAPI(
        title="Hotel Management",
        docs_url=None,
        redoc_url=None,
    )

    # Correlation ID middleware
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next) -> Response:
        with correlation_scope(request.headers.get(CORRELATION_ID_HEADER)) as cid:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = cid
            return response

    app.include_router(public.router)
    app.include_router(auth.router)
    app.include_router(hotels.router)
    app.include_router(reservations.router)

    return app
