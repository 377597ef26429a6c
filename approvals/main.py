"""
Approval policy service - trigger rule decoding, encoding and policy storage.

Features:
- Trigger conjunction <-> trigger form state conversion
- In-memory approval policy store
- Structured logging with correlation IDs
- Prometheus metrics
"""
from fastapi import FastAPI
from prometheus_client import make_asgi_app
from .config import get_settings
from .logging import setup_logging, get_logger
from .api.policies_router import router as policies_router
from .api.rules_router import router as rules_router
from .metrics import metrics
from .middleware.correlation import CorrelationMiddleware
from .middleware.error_handler import ErrorHandlerMiddleware, register_exception_handlers
from .middleware.metrics import MetricsMiddleware
from .middleware.validation import ValidationMiddleware

VERSION = "0.1.0"

settings = get_settings()

setup_logging(json_output=settings.LOG_JSON, service_name="approvals", level=settings.LOG_LEVEL)
logger = get_logger()

app = FastAPI(
    title="Approval Policies",
    version=VERSION,
    description="Approval policy trigger editing service",
)

# Last added runs first: correlation ID, then errors, metrics, validation
app.add_middleware(ValidationMiddleware, max_body_size=settings.MAX_BODY_SIZE)
app.add_middleware(MetricsMiddleware, metrics=metrics)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(CorrelationMiddleware)

register_exception_handlers(app)

app.include_router(rules_router)
app.include_router(policies_router)

metrics_app = make_asgi_app(registry=metrics.registry)
app.mount("/metrics", metrics_app)


@app.get("/health")
async def health():
    """Liveness probe."""
    logger.debug("health_check_liveness")
    return {"status": "ok", "service": "approvals", "version": VERSION}


@app.on_event("startup")
async def startup_event():
    logger.info(
        "service_starting",
        version=VERSION,
        env=settings.ENV,
        preserve_unknown_conditions=settings.PRESERVE_UNKNOWN_CONDITIONS,
    )


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("service_stopping")
    metrics.app_up.labels(service="approvals", version=VERSION).set(0)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "approvals.main:app",
        host="0.0.0.0",
        port=settings.SERVICE_PORT,
        reload=True,
    )
