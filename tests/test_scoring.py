import logging
import random

import pytest

from mea_dashboard.domain.reference import (
    MATURITY_LEVELS,
    Domain,
    Question,
    ReferenceCatalog,
    get_catalog,
)
from mea_dashboard.domain.services import ScoringService, compute_scores


def two_domain_catalog() -> ReferenceCatalog:
    return ReferenceCatalog(
        domains=(Domain("A", "Domain A"), Domain("B", "Domain B")),
        questions=(
            Question("A1", "A", "First", "A1"),
            Question("A2", "A", "Second", "A2"),
            Question("B1", "B", "Third", "B1"),
        ),
        levels=MATURITY_LEVELS,
    )


def test_all_fives():
    catalog = get_catalog()
    result = compute_scores({q.id: 5 for q in catalog.questions}, catalog)
    assert result.domain_scores == {"MEA01": 5.0, "MEA02": 5.0, "MEA03": 5.0}
    assert result.overall == 5.0


def test_all_zeros():
    catalog = get_catalog()
    result = compute_scores({q.id: 0 for q in catalog.questions}, catalog)
    assert set(result.domain_scores.values()) == {0.0}
    assert result.overall == 0.0


def test_mixed_domains_overall_is_count_weighted():
    result = compute_scores({"A1": 2, "A2": 4, "B1": 1}, two_domain_catalog())
    assert result.domain_scores == {"A": 3.0, "B": 1.0}
    assert result.overall == pytest.approx(7 / 3)
    # not the mean of the domain averages
    assert result.overall != pytest.approx(2.0)


def test_scores_stay_in_range_for_random_complete_answers():
    catalog = get_catalog()
    rng = random.Random(7)
    for _ in range(200):
        answers = {q.id: rng.randint(0, 5) for q in catalog.questions}
        result = compute_scores(answers, catalog)
        assert 0.0 <= result.overall <= 5.0
        assert all(0.0 <= s <= 5.0 for s in result.domain_scores.values())
        assert list(result.domain_scores) == [d.id for d in catalog.domains]


def test_missing_answer_counts_as_zero():
    result = compute_scores({"A1": 4, "B1": 2}, two_domain_catalog())
    assert result.domain_scores["A"] == 2.0
    assert result.overall == 2.0


def test_empty_domain_scores_zero():
    catalog = ReferenceCatalog(
        domains=(Domain("A", "A"), Domain("EMPTY", "No questions")),
        questions=(Question("A1", "A", "Only", "A1"),),
        levels=MATURITY_LEVELS,
    )
    result = compute_scores({"A1": 4}, catalog)
    assert result.domain_scores == {"A": 4.0, "EMPTY": 0.0}
    assert result.overall == 4.0


def test_scoring_service_ignores_unknown_answers():
    svc = ScoringService(two_domain_catalog(), logging.getLogger("test"))
    result = svc.score({"A1": 2, "A2": 4, "B1": 1, "ZZ": 5})
    assert result.overall == pytest.approx(7 / 3)

