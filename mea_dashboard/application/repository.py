"""
Owner-scoped assessment repository.

Every operation is bound to the identity the repository was built with:
records of other users are invisible, and a foreign id reads as not found.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session, sessionmaker

from ..domain.models import Assessment
from ..domain.reference import ReferenceCatalog, get_catalog
from ..domain.schemas import AssessmentDocument, parse_submission
from ..infrastructure.config import get_settings
from ..infrastructure.exceptions import AssessmentNotFoundError, PersistenceError
from ..infrastructure.identity import Identity
from ..infrastructure.logging import LogContext, get_logger
from ..infrastructure.models import AssessmentORM, utcnow
from ..infrastructure.repositories_assessment import AssessmentRepo
from ..infrastructure.uow import UnitOfWork
from .live import ChangeFeed, ErrorListener, SnapshotListener, Subscription

logger = get_logger(__name__)

TIMESTAMP_STEP = timedelta(microseconds=1)


class AssessmentRepository:
    """
    Create, list, get and watch the assessments of one user.

    Example:
        >>> repo = AssessmentRepository(SessionLocal, Identity("user-1"))
        >>> new_id = repo.create("ACME", answers, result.domain_scores, result.overall)
        >>> repo.list()[0].id == new_id
        True
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        identity: Identity,
        catalog: ReferenceCatalog | None = None,
        feed: ChangeFeed | None = None,
        clock: Callable[[], datetime] | None = None,
        namespace: str | None = None,
    ):
        self.uow = UnitOfWork(session_factory)
        self.identity = identity
        self.catalog = catalog or get_catalog()
        self.feed = feed or ChangeFeed()
        self.clock = clock or utcnow
        self.namespace = namespace or get_settings().app.namespace

    @property
    def owner_id(self) -> str:
        return self.identity.user_id

    def _repo(self, s: Session) -> AssessmentRepo:
        return AssessmentRepo(s, namespace=self.namespace, owner_id=self.owner_id)

    def _next_timestamp(self, latest: datetime | None) -> datetime:
        now = self.clock()
        if latest is not None and now <= latest:
            return latest + TIMESTAMP_STEP
        return now

    @staticmethod
    def _to_assessment(row: AssessmentORM) -> Assessment:
        try:
            return AssessmentDocument.model_validate(row).to_assessment()
        except PydanticValidationError as e:
            raise PersistenceError(
                f"Stored assessment {row.id} is malformed: {e.error_count()} invalid fields",
                operation="read assessment",
            ) from e

    # -------- Write --------

    def create(
        self,
        name: str,
        answers: Mapping[str, int],
        domain_scores: Mapping[str, float],
        overall: float,
    ) -> str:
        """
        Persist a new assessment and return its identifier.

        Raises:
            ValidationError: Blank name or incomplete answers; nothing is written
            PersistenceError: The store rejected or could not commit the write
        """
        submission = parse_submission(name, dict(answers), self.catalog)

        with LogContext(user_id=self.owner_id):
            with self.uow.begin("create assessment") as s:
                repo = self._repo(s)
                obj = repo.create(
                    id=uuid.uuid4().hex,
                    name=submission.name,
                    answers=submission.answers,
                    domain_scores={k: float(v) for k, v in domain_scores.items()},
                    overall_score=float(overall),
                    created_at=self._next_timestamp(repo.latest_timestamp()),
                )
                new_id = obj.id

            logger.info(f"Created assessment '{submission.name}' with ID {new_id}")

        self.feed.publish(self.namespace, self.owner_id)
        return new_id

    # -------- Read --------

    def list(self) -> list[Assessment]:
        """Every assessment of the current user, newest first."""
        with self.uow.begin("list assessments") as s:
            rows = self._repo(s).list_newest_first()
            items: list[Assessment] = []
            for row in rows:
                try:
                    items.append(self._to_assessment(row))
                except PersistenceError as e:
                    logger.warning(f"Skipping unreadable assessment: {e.message}")
            return items

    def get(self, assessment_id: str) -> Assessment:
        """
        Raises:
            AssessmentNotFoundError: Unknown id, or owned by another user
        """
        with self.uow.begin("get assessment") as s:
            row = self._repo(s).get(assessment_id)
            if row is None:
                raise AssessmentNotFoundError(assessment_id)
            return self._to_assessment(row)

    def count(self) -> int:
        with self.uow.begin("count assessments") as s:
            return self._repo(s).count_owned()

    # -------- Live --------

    def watch(
        self, listener: SnapshotListener, on_error: ErrorListener | None = None
    ) -> Subscription:
        """
        Push the current snapshot now and a fresh one after every create by this user.

        Refreshes of one subscription never overlap, so the last delivery is
        always the newest snapshot.
        """
        refresh_lock = threading.Lock()

        def refresh() -> None:
            with refresh_lock:
                try:
                    snapshot = self.list()
                except PersistenceError as e:
                    if on_error is None:
                        raise
                    on_error(e)
                    return
                listener(snapshot)

        token = self.feed.register(self.namespace, self.owner_id, refresh)
        subscription = Subscription(self.feed, token)
        try:
            refresh()
        except BaseException:
            subscription.close()
            raise
        return subscription
