"""
Main Application - Survey Report Console

FastAPI web application serving the tabular survey report screen: filter
panel, paginated results fetched from the survey backend and CSV export.

Author: Survey Console Team
"""

# ============================================================================
# IMPORTS
# ============================================================================
import logging
from datetime import datetime
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import config, setup_logging
from .reports import reports_router, report_pages_router, ReportWorkspace
from .reports.client import ReportApiClient

setup_logging()

# Global state
app_state = {
    "workspace": None
}

logger = logging.getLogger(__name__)


def create_workspace() -> ReportWorkspace:
    """Build the report workspace against the configured backend"""
    client = ReportApiClient.from_config(config.backend)
    return ReportWorkspace(client, per_page=config.reports.per_page)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    if app_state["workspace"] is None:
        app_state["workspace"] = create_workspace()
    logger.info(f"Survey console started (backend: {config.backend.base_url}, environment: {config.environment.value})")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    workspace = app_state.get("workspace")
    if workspace:
        try:
            workspace.close()
        except Exception as e:
            logger.error(f"Error closing backend client: {e}")
    app_state["workspace"] = None


# Create FastAPI app
app = FastAPI(
    title="Survey Report Console",
    description="Administrative screen for filtering, paging and exporting survey reports",
    version=__version__,
    lifespan=lifespan
)


# Add request logging middleware with error handling
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests and catch errors with enhanced error reporting"""
    start_time = datetime.now()

    # Skip logging health checks unless they fail (reduce noise)
    is_health_check = request.url.path == "/api/health"
    query_string = f"?{request.url.query}" if request.url.query else ""

    if not is_health_check:
        logger.info(f"Request: {request.method} {request.url.path}{query_string}")

    try:
        response = await call_next(request)

        duration = (datetime.now() - start_time).total_seconds()

        if response.status_code >= 500:
            logger.error(
                f"SERVER ERROR: {request.method} {request.url.path}{query_string} - "
                f"Status: {response.status_code} - Duration: {duration:.3f}s - "
                f"Client: {request.client.host if request.client else 'unknown'}"
            )
        elif response.status_code >= 400:
            logger.warning(
                f"CLIENT ERROR: {request.method} {request.url.path}{query_string} - "
                f"Status: {response.status_code} - Duration: {duration:.3f}s"
            )
        elif not is_health_check:
            logger.info(f"Response: {request.method} {request.url.path} - Status: {response.status_code} - Duration: {duration:.3f}s")

        return response
    except Exception as e:
        duration = (datetime.now() - start_time).total_seconds()
        logger.error(
            f"EXCEPTION in {request.method} {request.url.path}{query_string}\n"
            f"  Duration: {duration:.3f}s\n"
            f"  Exception Type: {type(e).__name__}\n"
            f"  Exception Message: {str(e)}",
            exc_info=True
        )
        raise

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.web.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reports_router)
app.include_router(report_pages_router)


# ============================================================================
# PAGES & HEALTH
# ============================================================================

@app.get("/")
async def index():
    """Send operators straight to the report screen"""
    return RedirectResponse(url="/reports/generate", status_code=303)


@app.get("/api/health")
async def health():
    """Health check"""
    return {
        "status": "ok",
        "version": __version__,
        "environment": config.environment.value,
        "workspace_ready": app_state.get("workspace") is not None
    }


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """HTTP exception handler with logging"""
    logger.warning(
        f"HTTP Exception: {request.method} {request.url.path} - "
        f"Status: {exc.status_code} - Detail: {exc.detail}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "path": str(request.url.path)
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler for unhandled errors"""
    logger.error(
        f"Unhandled Exception: {request.method} {request.url.path}\n"
        f"  Exception Type: {type(exc).__name__}\n"
        f"  Message: {str(exc)}",
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "exception_type": type(exc).__name__,
            "path": str(request.url.path)
        }
    )
