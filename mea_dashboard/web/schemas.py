from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from mea_dashboard.domain.models import Assessment
from mea_dashboard.domain.reference import ReferenceCatalog
from mea_dashboard.domain.reports import Report


class DomainInfo(BaseModel):
    id: str
    name: str
    focus: Optional[str] = None
    question_count: int


class QuestionInfo(BaseModel):
    id: str
    domain_id: str
    text: str
    citation: str


class MaturityLevelInfo(BaseModel):
    level: int
    title: str
    description: str


class CatalogResponse(BaseModel):
    domains: list[DomainInfo]
    questions: list[QuestionInfo]
    levels: list[MaturityLevelInfo]

    @classmethod
    def from_catalog(cls, catalog: ReferenceCatalog) -> CatalogResponse:
        return cls(
            domains=[
                DomainInfo(
                    id=d.id,
                    name=d.name,
                    focus=d.focus or None,
                    question_count=len(catalog.questions_for(d.id)),
                )
                for d in catalog.domains
            ],
            questions=[
                QuestionInfo(id=q.id, domain_id=q.domain_id, text=q.text, citation=q.citation)
                for q in catalog.questions
            ],
            levels=[
                MaturityLevelInfo(level=lv.level, title=lv.title, description=lv.description)
                for lv in catalog.levels
            ],
        )


class AssessmentCreateRequest(BaseModel):
    name: str = ""
    answers: dict[str, int] = Field(default_factory=dict)


class AssessmentCreated(BaseModel):
    id: str


class AssessmentItem(BaseModel):
    id: str
    name: str
    created_at: datetime
    answers: dict[str, int]
    domain_scores: dict[str, float]
    overall_score: float

    @classmethod
    def from_domain(cls, assessment: Assessment) -> AssessmentItem:
        return cls(
            id=assessment.id,
            name=assessment.name,
            created_at=assessment.created_at,
            answers=dict(assessment.answers),
            domain_scores=dict(assessment.domain_scores),
            overall_score=assessment.overall_score,
        )


class AssessmentListResponse(BaseModel):
    items: list[AssessmentItem]
    error: Optional[str] = None


class DashboardResponse(BaseModel):
    latest: Optional[AssessmentItem] = None
    maturity: Optional[str] = None
    total: int = 0
    error: Optional[str] = None


class ChartPointModel(BaseModel):
    label: str
    value: float
    max: float


class RecommendationModel(BaseModel):
    domain_id: str
    domain_name: str
    score: float
    text: str
    display: str


class PlotlyFigure(BaseModel):
    model_config = ConfigDict(extra="allow")

    data: list[Any]
    layout: dict[str, Any]
    frames: Optional[list[Any]] = None


class ReportResponse(BaseModel):
    assessment_id: str
    name: str
    created_at: datetime
    overall: float
    overall_display: str
    maturity_level: int
    maturity: str
    chart_series: list[ChartPointModel]
    recommendations: list[RecommendationModel]
    radar: Optional[PlotlyFigure] = None

    @classmethod
    def from_report(cls, report: Report, radar: dict[str, Any] | None = None) -> ReportResponse:
        return cls(
            assessment_id=report.assessment_id,
            name=report.name,
            created_at=report.created_at,
            overall=report.overall,
            overall_display=report.overall_display,
            maturity_level=report.maturity.level,
            maturity=report.maturity_display,
            chart_series=[ChartPointModel(**p.as_dict()) for p in report.chart_series],
            recommendations=[
                RecommendationModel(
                    domain_id=r.domain_id,
                    domain_name=r.domain_name,
                    score=r.score,
                    text=r.text,
                    display=r.display,
                )
                for r in report.recommendations
            ],
            radar=PlotlyFigure(**radar) if radar is not None else None,
        )
