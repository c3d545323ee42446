from __future__ import annotations

import logging
from dataclasses import dataclass

from .models import AnswerSet
from .reference import ReferenceCatalog, get_catalog


@dataclass(frozen=True)
class ScoreResult:
    domain_scores: dict[str, float]  # catalog domain order
    overall: float


def compute_scores(answers: AnswerSet, catalog: ReferenceCatalog | None = None) -> ScoreResult:
    """
    Per-domain and overall averages of an answer set.

    - Walks the catalog, not the answers: every domain keeps its full denominator
      and an unanswered question counts as level 0.
    - ``overall`` is the mean over all questions, so larger domains weigh more.
    - A domain without questions scores 0.0.
    """
    catalog = catalog or get_catalog()

    sums: dict[str, int] = {d.id: 0 for d in catalog.domains}
    counts: dict[str, int] = {d.id: 0 for d in catalog.domains}
    total_sum = 0
    total_count = 0

    for q in catalog.questions:
        level = answers.get(q.id) or 0
        sums[q.domain_id] += level
        counts[q.domain_id] += 1
        total_sum += level
        total_count += 1

    domain_scores = {
        domain_id: (sums[domain_id] / counts[domain_id]) if counts[domain_id] else 0.0
        for domain_id in sums
    }
    overall = (total_sum / total_count) if total_count else 0.0
    return ScoreResult(domain_scores=domain_scores, overall=overall)


class ScoringService:
    def __init__(self, catalog: ReferenceCatalog | None = None, logger: logging.Logger | None = None):
        self.catalog = catalog or get_catalog()
        self.logger = logger or logging.getLogger(__name__)

    def score(self, answers: AnswerSet) -> ScoreResult:
        unknown = sorted(set(answers) - self.catalog.question_ids)
        if unknown:
            self.logger.debug("Ignoring answers outside the catalog: %s", ", ".join(unknown))

        result = compute_scores(answers, self.catalog)
        self.logger.debug(
            "Scored %d answers across %d domains: overall %.2f",
            len(answers),
            len(result.domain_scores),
            result.overall,
        )
        return result
