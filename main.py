"""
ArtisanConnect API.

Run locally:
    uvicorn main:app --reload
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings, check_connection
from exceptions import AppError


def configure_logging() -> None:
    """JSON logs in production, coloured console output everywhere else."""
    logging.basicConfig(level=getattr(logging, settings.log_level), format="%(message)s")

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.is_production
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration and database reachability; close wizard sessions on exit."""
    logger.info(
        "artisanconnect_starting",
        environment=settings.environment,
        gemini=settings.gemini_configured,
        storage_bucket=settings.storage_bucket,
    )

    db_status = check_connection()
    if db_status["status"] == "healthy":
        logger.info(
            "database_connected",
            products=db_status["products_count"],
            drafts=db_status["drafts_count"]
        )
    else:
        # The wizard still works against local drafts, so keep serving
        logger.error("database_unreachable", error=db_status.get("error"))

    yield

    from services.wizard_session_service import get_wizard_session_service
    await get_wizard_session_service().close_all()
    logger.info("artisanconnect_stopped")


app = FastAPI(
    title="ArtisanConnect API",
    description=(
        "Listing backend for Indian artisans: the product upload wizard, "
        "the product catalog and AI-assisted marketing copy."
    ),
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Web frontend dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:4028",
        "http://localhost:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# SERVICE ENDPOINTS
# ===================

@app.get("/health")
async def health_check():
    """Database reachability plus the optional integrations in use."""
    db_status = check_connection()
    return {
        "status": "ok" if db_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.environment,
        "database": db_status,
        "gemini": "configured" if settings.gemini_configured else "fallback",
    }


@app.get("/")
async def root():
    return {
        "name": "ArtisanConnect API",
        "version": app.version,
        "docs": app.docs_url or "disabled",
        "endpoints": {
            "products": "/api/products",
            "marketing": "/api/marketing",
            "wizard": "/api/wizard/sessions",
        },
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning("request_failed", path=request.url.path, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    """Anything that escaped a route becomes a 500 in the AppError envelope."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": {"error": str(exc)} if settings.debug else {},
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        }
    )


# ===================
# ROUTERS
# ===================

from routes import products_router, marketing_router, wizard_router  # noqa: E402

app.include_router(products_router, prefix="/api/products", tags=["Products"])
app.include_router(marketing_router, prefix="/api/marketing", tags=["Marketing"])
app.include_router(wizard_router, prefix="/api/wizard", tags=["Product Upload Wizard"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.api_host, port=settings.api_port, reload=settings.debug)
