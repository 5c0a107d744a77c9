"""ReviewHub -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reviewhub.api.v1.router import api_v1_router
from reviewhub.config import settings
from reviewhub.core.exceptions import NotFoundError, ScraperError
from reviewhub.schemas import ErrorResponse, ServiceInfoResponse
from reviewhub.scrapers.register_adapters import register_all_adapters

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /",
    "GET /reviews",
    "GET /reviews/android",
    "GET /reviews/ios",
    "GET /app-info",
    "GET /stats",
    "GET /search",
    "GET /health",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    logger.info("Starting ReviewHub API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Android package: {settings.ANDROID_PACKAGE_ID}")
    logger.info(f"iOS app id: {settings.IOS_APP_ID}")
    logger.info(f"Language/country: {settings.LANGUAGE}/{settings.COUNTRY}")

    register_all_adapters()

    yield

    logger.info("Shutting down ReviewHub API server...")


app = FastAPI(
    title="ReviewHub API",
    description="App Store & Google Play review aggregator",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(api_v1_router)


@app.exception_handler(ScraperError)
async def scraper_error_handler(request: Request, exc: ScraperError):
    logger.error(f"Scraper error on {request.url.path}: {exc.message}")
    body = ErrorResponse(error=exc.message, platform=exc.platform)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    body = ErrorResponse(error=exc.message, available_endpoints=AVAILABLE_ENDPOINTS)
    return JSONResponse(status_code=404, content=body.model_dump(exclude_none=True))


@app.exception_handler(StarletteHTTPException)
async def unknown_route_handler(request: Request, exc: StarletteHTTPException):
    """List the available endpoints for unknown routes, defer everything else."""
    if exc.status_code == 404 and exc.detail == "Not Found":
        body = ErrorResponse(error="Endpoint not found", available_endpoints=AVAILABLE_ENDPOINTS)
        return JSONResponse(status_code=404, content=body.model_dump(exclude_none=True))
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    body = ErrorResponse(error="Internal server error", message=str(exc))
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@app.get("/", response_model=ServiceInfoResponse)
async def root():
    """Root endpoint listing the API's capabilities."""
    return ServiceInfoResponse(
        message=f"App Store & Google Play API - {settings.APP_NAME} Reviews",
        endpoints={
            "/reviews": "Get all reviews from both platforms",
            "/reviews/android": "Get Android/Google Play reviews only",
            "/reviews/ios": "Get iOS/App Store reviews only",
            "/app-info": "Get app information from both platforms",
            "/stats": "Get review statistics",
            "/search": "Search App Store apps by term",
            "/health": "Service health check",
        },
        app_info={
            "android_package": settings.ANDROID_PACKAGE_ID,
            "ios_app_id": settings.IOS_APP_ID,
            "language": settings.LANGUAGE,
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("reviewhub.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
