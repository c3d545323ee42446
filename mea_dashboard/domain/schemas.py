"""
Pydantic schemas for input validation and the storage deserialization boundary.

Submissions are checked for a non-empty name and a complete answer set;
stored records are re-validated into strongly typed ``Assessment`` values,
ignoring any field the schema does not declare.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from ..infrastructure.exceptions import MultipleValidationError, ValidationError
from .models import Assessment
from .reference import MAX_LEVEL, MIN_LEVEL, ReferenceCatalog

Level = Annotated[int, Field(ge=MIN_LEVEL, le=MAX_LEVEL)]
Score = Annotated[float, Field(ge=float(MIN_LEVEL), le=float(MAX_LEVEL))]

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


class BaseValidationSchema(BaseModel):
    """Base schema with common string clean-up."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    @field_validator("*", mode="before")
    @classmethod
    def sanitize_strings(cls, v):
        """Drop null bytes and control characters from string inputs."""
        if isinstance(v, str):
            return _CONTROL_CHARS.sub("", v.strip())
        return v


class AssessmentSubmissionInput(BaseValidationSchema):
    """A questionnaire submission. Pass ``context={"catalog": ...}`` to check completeness."""

    name: str = Field(..., description="Client or project name")
    answers: dict[str, Level]

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @field_validator("answers")
    @classmethod
    def validate_complete(cls, v: dict[str, int], info: ValidationInfo) -> dict[str, int]:
        catalog: ReferenceCatalog | None = (info.context or {}).get("catalog")
        if catalog is None:
            return v
        missing = catalog.missing_answers(v)
        if missing:
            raise ValueError(
                f"Please answer all {len(catalog.questions)} questions "
                f"({len(missing)} unanswered: {', '.join(missing)})"
            )
        # answers outside the catalog are not stored
        return {q.id: v[q.id] for q in catalog.questions}


class AssessmentDocument(BaseModel):
    """Stored assessment as read back from the store."""

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    id: str = Field(..., min_length=1)
    owner_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    created_at: datetime
    answers: dict[str, Level] = Field(default_factory=dict)
    domain_scores: dict[str, Score] = Field(default_factory=dict)
    overall_score: Score

    def to_assessment(self) -> Assessment:
        return Assessment(
            id=self.id,
            owner_id=self.owner_id,
            name=self.name,
            created_at=self.created_at,
            answers=dict(self.answers),
            domain_scores=dict(self.domain_scores),
            overall_score=self.overall_score,
        )


def parse_submission(
    name: str, answers: dict[str, Any], catalog: ReferenceCatalog
) -> AssessmentSubmissionInput:
    """
    Validate a submission against the catalog.

    Raises:
        ValidationError: One field failed
        MultipleValidationError: Several fields failed
    """
    try:
        return AssessmentSubmissionInput.model_validate(
            {"name": name, "answers": answers}, context={"catalog": catalog}
        )
    except PydanticValidationError as e:
        errors = [
            ValidationError(
                field=str(error["loc"][0]) if error["loc"] else "submission",
                message=error["msg"].removeprefix("Value error, "),
                value=error.get("input"),
            )
            for error in e.errors()
        ]
        if len(errors) == 1:
            raise errors[0] from e
        raise MultipleValidationError(errors) from e
