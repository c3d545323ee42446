from __future__ import annotations

import os

# must be set before mea_dashboard.infrastructure.logging is imported
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timedelta
from collections.abc import Callable, Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mea_dashboard.application.live import ChangeFeed
from mea_dashboard.application.repository import AssessmentRepository
from mea_dashboard.domain.reference import ReferenceCatalog, get_catalog
from mea_dashboard.domain.services import compute_scores
from mea_dashboard.infrastructure.identity import Identity
from mea_dashboard.infrastructure.models import Base

TEST_NAMESPACE = "test-namespace"


def memory_engine(create_tables: bool = True) -> Engine:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    if create_tables:
        Base.metadata.create_all(engine)
    return engine


def full_answers(level: int = 3, catalog: ReferenceCatalog | None = None) -> dict[str, int]:
    catalog = catalog or get_catalog()
    return {q.id: level for q in catalog.questions}


class SteppingClock:
    """Deterministic clock: advances by ``step`` on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(seconds=1)):
        self.now = start or datetime(2025, 1, 1, 12, 0, 0)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current


@pytest.fixture
def catalog() -> ReferenceCatalog:
    return get_catalog()


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = memory_engine()
    yield engine
    engine.dispose()


@pytest.fixture
def SessionLocal(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def feed() -> ChangeFeed:
    return ChangeFeed()


@pytest.fixture
def make_repository(
    SessionLocal: sessionmaker[Session], feed: ChangeFeed
) -> Callable[..., AssessmentRepository]:
    def factory(user_id: str = "user-a", **kwargs) -> AssessmentRepository:
        kwargs.setdefault("feed", feed)
        kwargs.setdefault("namespace", TEST_NAMESPACE)
        return AssessmentRepository(SessionLocal, Identity(user_id), **kwargs)

    return factory


@pytest.fixture
def repository(make_repository) -> AssessmentRepository:
    return make_repository()


def create_assessment(repo: AssessmentRepository, name: str, level: int = 3) -> str:
    """Score a uniform answer set and store it through ``repo``."""
    answers = full_answers(level, repo.catalog)
    result = compute_scores(answers, repo.catalog)
    return repo.create(name, answers, result.domain_scores, result.overall)
