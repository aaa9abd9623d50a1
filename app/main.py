import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.affiliates.router import router as affiliates_router
from app.core.config import settings
from app.core.exception_handlers import register_exception_handlers


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Linkio Affiliate API")

    # CORS: the signup form is served from other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(affiliates_router)

    return app


app = create_app()
