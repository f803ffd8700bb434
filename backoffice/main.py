from decimal import Decimal
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from backoffice.config.config import settings
from backoffice.auth.auth import IdentityProvider
from backoffice.db.database import init_db
from backoffice.middleware.middleware import setup_middleware
from backoffice.services.billing_service import CartRegistry
from backoffice.services.storage_service import LocalBlobStore
from backoffice.utils.errors import handle_validation_error
from backoffice.utils.helpers import get_current_time
from backoffice.utils.logger import setup_logging
from loguru import logger

# Import API routers
from backoffice.api.auth import router as auth_router
from backoffice.api.hotels import router as hotels_router
from backoffice.api.catalog import router as catalog_router
from backoffice.api.billing import router as billing_router
from backoffice.api.staff import router as staff_router
from backoffice.api.inventory import router as inventory_router
from backoffice.api.crash_reports import router as crash_reports_router
from backoffice.api.dashboard import router as dashboard_router

# Setup logging
setup_logging()

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Hotel back-office API: billing, staff attendance, catalog and inventory",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )

    # Long-lived services shared by all requests
    app.state.identity = IdentityProvider(
        secret_key=settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
    )
    app.state.carts = CartRegistry(Decimal(str(settings.TAX_RATE)))
    app.state.blob_store = LocalBlobStore(settings.UPLOAD_DIR, settings.PUBLIC_BASE_URL)

    setup_middleware(app)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        body = handle_validation_error(exc)
        logger.warning(f"Rejected {request.method} {request.url.path}: {body['details']}")
        return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=body)

    # Uploaded hotel logos
    app.mount("/uploads", StaticFiles(directory=app.state.blob_store.root), name="uploads")

    for router in (auth_router, hotels_router, catalog_router, billing_router,
                   staff_router, inventory_router, crash_reports_router, dashboard_router):
        app.include_router(router, prefix=settings.API_PREFIX)

    @app.on_event("startup")
    async def on_startup():
        """Create tables on startup"""
        await init_db()
        logger.info(f"{settings.APP_NAME} {settings.VERSION} started ({settings.ENVIRONMENT})")

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": settings.VERSION,
            "docs": "/docs"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring"""
        return {
            "status": "healthy",
            "timestamp": get_current_time().isoformat(),
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT
        }

    @app.get("/api/health")
    async def api_health_check():
        return {
            "status": "healthy",
            "api_version": settings.VERSION,
            "timestamp": get_current_time().isoformat()
        }

    return app

app = create_app()

# For development server
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backoffice.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
