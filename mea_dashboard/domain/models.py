from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

AnswerSet = Mapping[str, int]  # question id -> level 0..5


@dataclass(frozen=True, slots=True)
class Assessment:
    id: str
    owner_id: str
    name: str
    created_at: datetime
    answers: dict[str, int]
    domain_scores: dict[str, float]  # domain id -> 0.0..5.0
    overall_score: float  # mean over every answer, not over domains
