import pytest
from pydantic import ValidationError as PydanticValidationError

from mea_dashboard.domain.schemas import (
    AssessmentDocument,
    AssessmentSubmissionInput,
    parse_submission,
)
from mea_dashboard.infrastructure.exceptions import MultipleValidationError, ValidationError
from tests.conftest import full_answers


class TestSubmissionValidation:
    """Submission checks: non-empty name and a complete answer set."""

    def test_valid_submission(self, catalog):
        submission = parse_submission("  ACME Corp - Q4  ", full_answers(3), catalog)
        assert submission.name == "ACME Corp - Q4"
        assert len(submission.answers) == 17

    def test_long_name_is_accepted(self, catalog):
        submission = parse_submission("A" * 300, full_answers(3), catalog)
        assert len(submission.name) == 300

    def test_blank_name_is_rejected(self, catalog):
        with pytest.raises(ValidationError) as exc_info:
            parse_submission("   ", full_answers(3), catalog)
        assert exc_info.value.field == "name"
        assert exc_info.value.reason == "Name cannot be empty"

    def test_control_characters_are_stripped(self, catalog):
        assert parse_submission("AC\x00ME", full_answers(1), catalog).name == "ACME"

    def test_incomplete_answers_are_rejected(self, catalog):
        answers = full_answers(2)
        answers.pop("MEA01.01")
        answers.pop("MEA03.04")
        with pytest.raises(ValidationError) as exc_info:
            parse_submission("ACME", answers, catalog)
        assert "Please answer all 17 questions" in exc_info.value.reason
        assert "MEA01.01, MEA03.04" in exc_info.value.reason

    def test_level_out_of_range_is_rejected(self, catalog):
        answers = full_answers(2)
        answers["MEA02.01"] = 6
        with pytest.raises(ValidationError) as exc_info:
            parse_submission("ACME", answers, catalog)
        assert exc_info.value.field == "answers"

    def test_without_catalog_only_levels_are_checked(self):
        submission = AssessmentSubmissionInput.model_validate({"name": "ACME", "answers": {"x": 1}})
        assert submission.answers == {"x": 1}


def test_parse_submission_drops_answers_outside_catalog(catalog):
    answers = full_answers(4)
    answers["UNKNOWN"] = 1
    submission = parse_submission("ACME", answers, catalog)
    assert "UNKNOWN" not in submission.answers
    assert list(submission.answers) == [q.id for q in catalog.questions]


def test_parse_submission_raises_single_error(catalog):
    with pytest.raises(ValidationError) as exc_info:
        parse_submission("", full_answers(1), catalog)
    assert not isinstance(exc_info.value, MultipleValidationError)
    assert exc_info.value.field == "name"
    assert exc_info.value.user_message == "Invalid name: Name cannot be empty"


def test_parse_submission_collects_multiple_errors(catalog):
    with pytest.raises(MultipleValidationError) as exc_info:
        parse_submission(" ", {}, catalog)
    fields = {e.field for e in exc_info.value.validation_errors}
    assert fields == {"name", "answers"}


def test_assessment_document_ignores_unknown_fields():
    from datetime import datetime

    doc = AssessmentDocument.model_validate(
        {
            "id": "abc",
            "owner_id": "u1",
            "name": "ACME",
            "created_at": datetime(2025, 1, 1),
            "answers": {"MEA01.01": 3},
            "domain_scores": {"MEA01": 3.0},
            "overall_score": 3.0,
            "legacy": "ignored",
        }
    )
    assessment = doc.to_assessment()
    assert assessment.overall_score == 3.0
    assert not hasattr(assessment, "legacy")


def test_assessment_document_rejects_out_of_range_score():
    from datetime import datetime

    with pytest.raises(PydanticValidationError):
        AssessmentDocument.model_validate(
            {
                "id": "abc",
                "owner_id": "u1",
                "name": "ACME",
                "created_at": datetime(2025, 1, 1),
                "overall_score": 7.5,
            }
        )
