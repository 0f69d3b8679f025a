"""
FastAPI application entry point for the Invoice Dashboard backend.

This module creates the FastAPI app instance and registers all routers.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from invoice_dashboard.config import settings
from invoice_dashboard.routes.auth import router as auth_router
from invoice_dashboard.routes.health import router as health_router
from invoice_dashboard.routes.invoices import router as invoices_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    """
    Allowed CORS origins.

    Production uses CORS_ORIGINS as configured (empty means none). Other
    environments allow every origin for local development.
    """
    if settings.is_production():
        origins = [origin.strip() for origin in settings.CORS_ORIGINS if origin.strip()]
        if not origins:
            logger.warning("CORS_ORIGINS not set in production. No web origins allowed.")
        else:
            logger.info(f"CORS configured for production with {len(origins)} allowed origins")
        return origins

    logger.info(f"CORS configured for {settings.ENVIRONMENT}: allowing all origins")
    return ["*"]


app = FastAPI(
    title="Invoice Dashboard API",
    description="Form actions and data endpoints for the invoice dashboard",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Log validation errors on query/path parameters.

    Invoice form fields are validated inside the actions and never reach here.
    """
    logger.error(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "details": jsonable_errors(exc),
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Strip non-serializable context (exception objects) from error entries."""
    return [
        {key: value for key, value in error.items() if key in ("type", "loc", "msg")}
        for error in exc.errors()
    ]


# Credentials are needed for the session cookie, which "*" cannot carry
cors_origins = _get_cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=cors_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(invoices_router)

logger.info("FastAPI app initialized successfully")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("invoice_dashboard.main:app", host="0.0.0.0", port=8000, reload=settings.is_development())
