from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backoffice.config.config import settings
from backoffice.middleware.logging import REQUEST_ID_HEADER
from loguru import logger

def setup_cors(app: FastAPI) -> None:
    """
    Allow the back-office web client to call the API.

    Args:
       app: FastAPI application instance
    """
    origins = settings.CORS_ALLOW_ORIGINS
    logger.info(f"Setting up CORS middleware with allowed origins: {origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Credentials cannot be combined with a wildcard origin
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS and "*" not in origins,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
        expose_headers=[REQUEST_ID_HEADER],
        max_age=600,
    )
