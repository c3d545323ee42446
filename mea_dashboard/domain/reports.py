from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .models import Assessment
from .recommendations import recommend
from .reference import MAX_LEVEL, MaturityLevel, ReferenceCatalog, get_catalog


@dataclass(frozen=True, slots=True)
class ChartPoint:
    label: str
    value: float
    max: float = float(MAX_LEVEL)

    def as_dict(self) -> dict[str, object]:
        return {"label": self.label, "value": self.value, "max": self.max}


@dataclass(frozen=True, slots=True)
class RecommendationItem:
    domain_id: str
    domain_name: str
    score: float
    text: str

    @property
    def display(self) -> str:
        return f"{self.text} (Score: {self.score:.1f})"


@dataclass(frozen=True)
class Report:
    assessment_id: str
    name: str
    created_at: datetime
    overall: float
    maturity: MaturityLevel
    chart_series: tuple[ChartPoint, ...]
    recommendations: tuple[RecommendationItem, ...]

    @property
    def overall_display(self) -> str:
        return f"{self.overall:.1f}"

    @property
    def maturity_display(self) -> str:
        return f"Level {self.maturity.level}: {self.maturity.title}"


def build_report(assessment: Assessment, catalog: ReferenceCatalog | None = None) -> Report:
    """
    Derive display data from a stored assessment.

    Domains follow catalog order; a domain absent from the stored scores is
    reported as 0.0. The maturity tier floors the overall score.
    """
    catalog = catalog or get_catalog()

    chart: list[ChartPoint] = []
    recommendations: list[RecommendationItem] = []
    for domain in catalog.domains:
        score = float(assessment.domain_scores.get(domain.id, 0.0))
        chart.append(ChartPoint(label=domain.id, value=score))
        recommendations.append(
            RecommendationItem(
                domain_id=domain.id,
                domain_name=domain.name,
                score=score,
                text=recommend(score, domain.id),
            )
        )

    return Report(
        assessment_id=assessment.id,
        name=assessment.name,
        created_at=assessment.created_at,
        overall=assessment.overall_score,
        maturity=catalog.level_for_score(assessment.overall_score),
        chart_series=tuple(chart),
        recommendations=tuple(recommendations),
    )
