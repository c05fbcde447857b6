"""FastAPI wiring shared by the service entry points and API tests.

``create_app()`` builds the HTTP surface for the Order and Delivery services:
each request is wrapped in the Protean domain context that owns its URL
prefix, and service errors are mapped onto status codes with a uniform
``{"error": <code>, "detail": <message>}`` body.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.integrations.fastapi import register_exception_handlers

from shared.errors import (
    DeliveryNotAssigned,
    InvalidIdentity,
    InvalidTransition,
    NotFound,
    ServiceError,
    UpstreamUnavailable,
)

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    NotFound: 404,
    DeliveryNotAssigned: 409,
    InvalidTransition: 409,
    UpstreamUnavailable: 503,
    InvalidIdentity: 401,
    ServiceError: 500,
}


async def in_domain_thread(domain, fn, *args, **kwargs):
    """Run ``fn`` on a worker thread inside ``domain``'s context.

    Used for anything that makes a blocking RPC call, which would otherwise
    stall the event loop (and deadlock when the callee is this same process).
    """

    def _call():
        with domain.domain_context():
            return fn(*args, **kwargs)

    return await run_in_threadpool(_call)


def _error_response(status_code: int, code: str, detail) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code, "detail": detail})


def register_error_handlers(app: FastAPI) -> None:
    """Map the shared error taxonomy (and Protean validation) onto HTTP."""
    register_exception_handlers(app)

    for error_cls, status_code in _STATUS_CODES.items():

        async def handler(request: Request, exc: ServiceError, status_code: int = status_code):
            if status_code >= 500:
                logger.error("Request failed", path=request.url.path, error=exc.code, detail=exc.message)
            return _error_response(status_code, exc.code, exc.message)

        app.add_exception_handler(error_cls, handler)

    async def validation_handler(request: Request, exc: ValidationError):
        return _error_response(400, "validation_error", exc.messages)

    app.add_exception_handler(ValidationError, validation_handler)


def create_app(title: str = "Fulfillment API", lifespan=None) -> FastAPI:
    """Build the app with domain-context middleware, routers and error handlers.

    Domains are expected to be initialized by the caller.
    """
    from delivery.api.routes import delivery_router
    from delivery.domain import delivery
    from ordering.api.routes import order_router
    from ordering.domain import ordering

    route_domain_map = {
        "/deliveries": delivery,
        "/orders": ordering,
    }

    app = FastAPI(
        title=title,
        description="Order and Delivery services with status synchronization",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the correct Protean domain context for each request."""
        for prefix, domain in route_domain_map.items():
            if request.url.path.startswith(prefix):
                with domain.domain_context():
                    return await call_next(request)
        # Health check, docs
        return await call_next(request)

    app.include_router(delivery_router)
    app.include_router(order_router)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domains": {name: {"name": domain.name} for name, domain in route_domain_map.items()},
            }
        )

    return app
