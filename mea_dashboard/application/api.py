"""
Application API layer with error handling and validation.

High-level functions used by the web routes and the Streamlit pages:
submission, history, dashboard summary and report loading. Store failures
on the read paths degrade to empty results carrying a user-facing message.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from ..domain.models import Assessment
from ..domain.reference import ReferenceCatalog
from ..domain.reports import Report, build_report
from ..domain.schemas import parse_submission
from ..domain.services import ScoringService
from ..infrastructure.exceptions import (
    AssessmentNotFoundError,
    PersistenceError,
    log_error_details,
)
from ..infrastructure.logging import get_logger, log_operation
from .repository import AssessmentRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class AssessmentHistory:
    items: list[Assessment] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class DashboardSummary:
    latest: Assessment | None = None
    total: int = 0
    error: str | None = None


@log_operation("submit_assessment")
def submit_assessment(
    repository: AssessmentRepository,
    name: str,
    answers: Mapping[str, int],
    catalog: ReferenceCatalog | None = None,
) -> str:
    """
    Validate, score and persist a questionnaire submission.

    Args:
        repository: Repository bound to the submitting user
        name: Client or project name
        answers: Question id -> level (0..5) for every catalog question
        catalog: Catalog to score against (defaults to the repository's)

    Returns:
        Identifier of the new assessment

    Raises:
        ValidationError: Blank name or unanswered questions; nothing is stored
        MultipleValidationError: Several of the above at once
        PersistenceError: The store could not commit; the caller may retry

    Example:
        >>> new_id = submit_assessment(repo, "ACME Corp", answers)
    """
    catalog = catalog or repository.catalog
    submission = parse_submission(name, dict(answers), catalog)
    result = ScoringService(catalog, logger).score(submission.answers)

    try:
        return repository.create(
            submission.name, submission.answers, result.domain_scores, result.overall
        )
    except PersistenceError as e:
        logger.error(
            "Failed to store assessment", extra=log_error_details(e, {"assessment_name": name})
        )
        raise


def load_assessment_history(repository: AssessmentRepository) -> AssessmentHistory:
    """All assessments of the user, newest first; an empty history on store failure."""
    try:
        return AssessmentHistory(items=repository.list())
    except PersistenceError as e:
        logger.error("Failed to load assessment history", extra=log_error_details(e))
        return AssessmentHistory(items=[], error=e.user_message)


def load_dashboard(repository: AssessmentRepository) -> DashboardSummary:
    history = load_assessment_history(repository)
    return DashboardSummary(
        latest=history.items[0] if history.items else None,
        total=len(history.items),
        error=history.error,
    )


def load_report(
    repository: AssessmentRepository,
    assessment_id: str,
    catalog: ReferenceCatalog | None = None,
) -> Report | None:
    """
    Build the report of one assessment.

    Returns:
        The report, or None when the id is unknown or owned by someone else

    Raises:
        PersistenceError: The store could not be read
    """
    try:
        assessment = repository.get(assessment_id)
    except AssessmentNotFoundError:
        logger.info(f"No data for assessment {assessment_id}")
        return None
    return build_report(assessment, catalog or repository.catalog)
