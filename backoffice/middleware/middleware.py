from fastapi import FastAPI
from fastapi.middleware.httpsredirect import HTTPSRedirectMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from backoffice.middleware.logging import RequestLoggingMiddleware
from backoffice.middleware.cors import setup_cors
from backoffice.config.config import settings
from loguru import logger

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        # The interactive docs load their assets from a CDN
        if not request.url.path.startswith(("/docs", "/redoc")):
            response.headers["Content-Security-Policy"] = "default-src 'self'; img-src 'self' data:"
        return response

def setup_middleware(app: FastAPI) -> None:
    """
    Setup all middleware for the application. The last one added runs first.

    Args:
        app: FastAPI application instance
    """
    if settings.ENVIRONMENT == "production":
        app.add_middleware(HTTPSRedirectMiddleware)

    app.add_middleware(SecurityHeadersMiddleware)
    setup_cors(app)
    app.add_middleware(RequestLoggingMiddleware, exclude_paths=["/health", "/api/health"])

    logger.info("Middleware setup complete")
