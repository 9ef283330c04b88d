"""FastAPI application main module.

This module defines the main FastAPI application instance and core API endpoints
for the CoRate recommendation service: health, status and metrics, plus the
error handler that turns ``CoRateException`` into JSON responses.
"""

from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src import __version__
from src.api.config import settings
from src.api.dependencies import load_store_if_needed
from src.api.exceptions import CoRateException, StoreUnavailableError
from src.api.logging_config import RequestLoggingMiddleware, setup_logging
from src.api.metrics import metrics_service
from src.api.routes import ratings, recommend


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    yield


# Create FastAPI application instance
app = FastAPI(
    title="CoRate API",
    description="Rating-based collaborative filtering recommendation service",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(recommend.router)
app.include_router(ratings.router)


@app.exception_handler(CoRateException)
async def corate_exception_handler(request: Request, exc: CoRateException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


class StatusResponse(BaseModel):
    store_loaded: bool
    num_users: int = 0
    num_products: int = 0
    num_ratings: int = 0
    error: Optional[str] = None


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Returns a simple status response to verify the API is running.

    Example:
        >>> response = client.get("/ping")
        >>> assert response.json() == {"status": "ok"}
    """
    return {"status": "ok"}


@app.get("/status", response_model=StatusResponse)
def store_status() -> StatusResponse:
    """Report whether rating data is loaded and how much of it there is.

    Never fails because of missing data; it reports ``store_loaded: false``.
    """
    try:
        store = load_store_if_needed()
    except StoreUnavailableError as e:
        return StatusResponse(store_loaded=False, error=e.message)

    return StatusResponse(
        store_loaded=True,
        num_users=len(store.list_users()),
        num_products=len(store.list_products()),
        num_ratings=len(store.list_ratings()),
    )


@app.get("/metrics")
def metrics() -> Dict:
    """Call counts, fallback counts and latency per operation."""
    return metrics_service.get_metrics()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
