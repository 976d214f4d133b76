# SPDX-License-Identifier: Apache-2.0
"""FastAPI app factory. Thin layer: security middleware + routers only."""
import logging

from fastapi import FastAPI

from ohmage import __version__
from ohmage.config import settings
from ohmage.core.security import add_security_middleware
from ohmage.database import create_db_and_tables
from ohmage.routers import campaigns, survey_responses, system, users


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("ohmage").setLevel((level or settings.log_level).upper())


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="ohmage API", version=__version__)

    add_security_middleware(app)

    @app.on_event("startup")
    def on_startup():
        create_db_and_tables()

    app.include_router(system.router, prefix="/system")
    app.include_router(campaigns.router, prefix="/campaigns")
    app.include_router(survey_responses.router, prefix="/survey_responses")
    app.include_router(users.router, prefix="/users")

    return app


app = create_app()
