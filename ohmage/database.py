# SPDX-License-Identifier: Apache-2.0
"""DB connection and session management."""
from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ohmage.config import SQL_URL
from ohmage.models import (  # noqa: F401 – register all models with SQLModel.metadata
    Campaign,
    CampaignClass,
    PromptResponse,
    SurveyResponse,
    User,
    UserCampaignRole,
    UserClass,
    UserPersonal,
)


def make_engine(url: str):
    """SQLite needs cross-thread access for the TestClient; in-memory SQLite needs one shared connection."""
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(SQL_URL)


def get_session():
    """Yield a DB session (for FastAPI Depends)."""
    with Session(engine) as session:
        yield session


@contextmanager
def session_scope(bind=None):
    """Context manager for use outside request handlers."""
    with Session(bind or engine) as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


def create_db_and_tables(bind=None) -> None:
    SQLModel.metadata.create_all(bind or engine)
