from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from datetime import datetime
from contextlib import asynccontextmanager

from ai_copywriter.config import settings
from ai_copywriter.models.schemas import ErrorResponse
from ai_copywriter.api.routes import router
from ai_copywriter.services.container import build_services

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting up...")
    # Tests may install their own services before start-up
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
        logger.info("Services initialized successfully")

    yield
    logger.info("Application shutting down...")

app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes with prefix
app.include_router(router, prefix="/api", tags=["Content Generation"])


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": "AI Product Copywriter API",
        "version": settings.API_VERSION,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "endpoints": {
            "generate_content": "/api/generate-content",
            "regenerate_content": "/api/regenerate-content",
            "generate_from_image": "/api/generate-from-image",
            "apply_content": "/api/apply-content",
            "settings": "/api/settings",
            "delete_api_key": "/api/api-key/{provider}",
            "test": "/api/test",
            "health": "/health"
        },
        "status": "active"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    services = getattr(app.state, "services", None)
    return {
        "status": "healthy",
        "timestamp": datetime.now(),
        "version": settings.API_VERSION,
        "service": settings.API_TITLE,
        "providers": services.providers.available() if services else []
    }


def error_response(status_code: int, error: str, message) -> JSONResponse:
    payload = ErrorResponse(error=error, message=str(message), status_code=status_code)
    return JSONResponse(status_code=status_code, content=payload.model_dump(mode="json"))


# Global exception handlers
@app.exception_handler(404)
async def not_found_handler(request, exc):
    return error_response(404, "Not Found", getattr(exc, "detail", None) or "The requested resource was not found")


@app.exception_handler(500)
async def internal_server_error_handler(request, exc):
    logger.error(f"Unhandled error on {request.url.path}: {exc}")
    return error_response(500, "Internal Server Error", "An internal server error occurred")


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    return error_response(exc.status_code, "HTTP Error", exc.detail)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ai_copywriter.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
