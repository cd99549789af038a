import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from faqbot.core.config import Settings, settings
from faqbot.core.logging import configure_logging
from faqbot.core.errors import (
    CollaboratorError, EnforceJSONMiddleware, ValidationError,
    collaborator_error_handler, request_validation_handler, validation_error_handler,
)
from faqbot.faq.service import FaqContext, bootstrap
from faqbot.routers import ask, health, metrics


def create_app(cfg: Settings | None = None, context: FaqContext | None = None) -> FastAPI:
    """
    Builds the HTTP shell. The FAQ context is bootstrapped once in the
    lifespan unless one is handed in already built.
    """
    cfg = cfg or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "faq", None) is None:
            # BootstrapError propagates: no traffic on a partial index
            app.state.faq = await bootstrap(cfg)
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.faq = context

    app.add_middleware(EnforceJSONMiddleware, dev_errors=cfg.dev_errors)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(CollaboratorError, collaborator_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.include_router(ask.router, prefix="/ask", tags=["ask"])
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(metrics.router, prefix="/metrics", tags=["metrics"])

    if os.path.isdir(cfg.images_dir):
        app.mount("/images", StaticFiles(directory=cfg.images_dir), name="images")
    return app


configure_logging(settings.log_level, settings.log_format)

app = create_app()
