from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from signdesk.api.routes import dashboard, documents, health, signatures, templates
from signdesk.core.config import Settings, settings as default_settings
from signdesk.core.exceptions import SignDeskError
from signdesk.core.logging import get_logger, setup_logging
from signdesk.services.container import ServiceContainer, build_store, init_store
from signdesk.services.storage.base import DocumentStore

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
) -> FastAPI:
    """Build the API around one store instance.

    ``store`` is injected by tests; otherwise it is built from
    ``STORAGE_BACKEND``.
    """
    settings = settings or default_settings
    setup_logging(settings)
    store = store if store is not None else build_store(settings)
    services = ServiceContainer.build(settings, store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await init_store(settings, services.store)
        logger.info(f"{settings.PROJECT_NAME} is starting up ({settings.STORAGE_BACKEND} store)")
        yield
        await services.store.close()
        logger.info(f"{settings.PROJECT_NAME} is shutting down...")

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.state.services = services
    app.state.settings = settings

    allowed_origins = ["http://localhost:5173", "http://localhost:3000"]
    if settings.ALLOWED_ORIGINS and settings.ALLOWED_ORIGINS != "*":
        allowed_origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",")] + allowed_origins
    elif settings.ALLOWED_ORIGINS == "*":
        allowed_origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SignDeskError)
    async def signdesk_error_handler(request: Request, exc: SignDeskError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(health, tags=["Health"])
    app.include_router(documents, prefix=f"{settings.API_V1_STR}/documents", tags=["Documents"])
    app.include_router(templates, prefix=f"{settings.API_V1_STR}/templates", tags=["Templates"])
    app.include_router(signatures, prefix=f"{settings.API_V1_STR}/signatures", tags=["Signatures"])
    app.include_router(dashboard, prefix=f"{settings.API_V1_STR}/dashboard", tags=["Dashboard"])

    return app
