"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from office_ledger.api.dependencies import get_request_id
from office_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from office_ledger.api.v1 import charges, ledger, payables, sales
from office_ledger.domain.exceptions import DomainException
from office_ledger.infrastructure.observability.logging import setup_logging
from office_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Map domain errors to their status code with a stable error code"""
    extra = {"request_id": get_request_id(request), "code": exc.code, "path": request.url.path}
    if exc.http_status >= 500:
        logging.error(f"Request failed: {exc.message}", extra=extra)
    else:
        logging.warning(f"Request rejected: {exc.message}", extra=extra)
    return JSONResponse(status_code=exc.http_status, content={"code": exc.code, "message": exc.message})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Office Ledger",
        description="Receivables/payables schedule generation and ledger reconciliation",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(sales.router, prefix="/v1", tags=["sales"])
    app.include_router(charges.router, prefix="/v1", tags=["charges"])
    app.include_router(payables.router, prefix="/v1", tags=["payables"])
    app.include_router(ledger.router, prefix="/v1", tags=["ledger"])

    return app


app = create_app()
