"""
Reference data for the COBIT 5 MEA capability assessment.

The catalog is fixed at import time: three MEA domains, their management
practices as questions, and the six capability levels (0..5).
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

MIN_LEVEL = 0
MAX_LEVEL = 5


@dataclass(frozen=True, slots=True)
class Domain:
    id: str
    name: str
    focus: str = ""


@dataclass(frozen=True, slots=True)
class Question:
    id: str
    domain_id: str
    text: str
    citation: str


@dataclass(frozen=True, slots=True)
class MaturityLevel:
    level: int  # 0..5
    title: str
    description: str


@dataclass(frozen=True)
class ReferenceCatalog:
    """Ordered, immutable catalog of domains, questions and maturity levels."""

    domains: tuple[Domain, ...]
    questions: tuple[Question, ...]
    levels: tuple[MaturityLevel, ...]
    _questions_by_id: dict[str, Question] = field(init=False, repr=False, compare=False)
    _domains_by_id: dict[str, Domain] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "domains", tuple(self.domains))
        object.__setattr__(self, "questions", tuple(self.questions))
        object.__setattr__(self, "levels", tuple(sorted(self.levels, key=lambda lv: lv.level)))

        expected = list(range(MIN_LEVEL, MAX_LEVEL + 1))
        if [lv.level for lv in self.levels] != expected:
            raise ValueError(f"Maturity levels must be exactly {expected}")

        domains_by_id = {d.id: d for d in self.domains}
        if len(domains_by_id) != len(self.domains):
            raise ValueError("Domain identifiers must be unique")

        questions_by_id: dict[str, Question] = {}
        for q in self.questions:
            if q.id in questions_by_id:
                raise ValueError(f"Duplicate question identifier: {q.id}")
            if q.domain_id not in domains_by_id:
                raise ValueError(f"Question {q.id} references unknown domain {q.domain_id}")
            questions_by_id[q.id] = q

        object.__setattr__(self, "_questions_by_id", questions_by_id)
        object.__setattr__(self, "_domains_by_id", domains_by_id)

    @property
    def question_ids(self) -> frozenset[str]:
        return frozenset(self._questions_by_id)

    def question(self, question_id: str) -> Question:
        return self._questions_by_id[question_id]

    def domain(self, domain_id: str) -> Domain:
        return self._domains_by_id[domain_id]

    def questions_for(self, domain_id: str) -> tuple[Question, ...]:
        return tuple(q for q in self.questions if q.domain_id == domain_id)

    def level(self, level: int) -> MaturityLevel:
        if not MIN_LEVEL <= level <= MAX_LEVEL:
            raise KeyError(level)
        return self.levels[level - MIN_LEVEL]

    def level_for_score(self, score: float) -> MaturityLevel:
        """Floor the score into 0..5; 4.9 reports as level 4, never rounded up."""
        if score is None or math.isnan(score):
            return self.levels[0]
        if math.isinf(score):
            return self.levels[-1] if score > 0 else self.levels[0]
        floored = math.floor(score)
        return self.level(min(max(floored, MIN_LEVEL), MAX_LEVEL))

    def missing_answers(self, answered: Iterable[str]) -> list[str]:
        """Catalog question ids (in catalog order) absent from ``answered``."""
        answered = set(answered)
        return [q.id for q in self.questions if q.id not in answered]


MEA_DOMAINS: tuple[Domain, ...] = (
    Domain(
        "MEA01",
        "Monitor, Evaluate and Assess Performance and Conformance",
        "Monitoring performance and conformance to ensure IT delivers value.",
    ),
    Domain(
        "MEA02",
        "Monitor, Evaluate and Assess the System of Internal Control",
        "Continuous monitoring and evaluation of the internal control environment.",
    ),
    Domain(
        "MEA03",
        "Monitor, Evaluate and Assess Conformance with External Requirements",
        "Confirming compliance with laws, regulations and contractual requirements.",
    ),
)

MATURITY_LEVELS: tuple[MaturityLevel, ...] = (
    MaturityLevel(0, "Incomplete", "The process is not implemented or fails to achieve its purpose."),
    MaturityLevel(1, "Performed", "The process is implemented and achieves its purpose."),
    MaturityLevel(
        2,
        "Managed",
        "The process is implemented in a managed fashion (planned, monitored and adjusted) "
        "and its work products are established, controlled and maintained.",
    ),
    MaturityLevel(
        3,
        "Established",
        "The managed process is implemented using a defined process that is tailored "
        "from a standard process.",
    ),
    MaturityLevel(
        4,
        "Predictable",
        "The established process operates within defined limits to achieve its outcomes.",
    ),
    MaturityLevel(
        5,
        "Optimizing",
        "The predictable process is continuously improved to meet current and projected "
        "business goals.",
    ),
)

MEA_QUESTIONS: tuple[Question, ...] = (
    # MEA01: Monitor, Evaluate and Assess Performance and Conformance
    Question("MEA01.01", "MEA01", "Has a monitoring approach been established?",
             "MEA01.01 Establish a monitoring approach."),
    Question("MEA01.02", "MEA01", "Have performance and conformance targets been set?",
             "MEA01.02 Set performance and conformance targets."),
    Question("MEA01.03", "MEA01", "Are performance and conformance data collected and processed?",
             "MEA01.03 Collect and process performance and conformance data."),
    Question("MEA01.04", "MEA01", "Is performance analysed and reported?",
             "MEA01.04 Analyse and report performance."),
    Question("MEA01.05", "MEA01", "Is the implementation of corrective actions ensured?",
             "MEA01.05 Ensure the implementation of corrective actions."),
    # MEA02: Monitor, Evaluate and Assess the System of Internal Control
    Question("MEA02.01", "MEA02", "Are internal controls monitored?",
             "MEA02.01 Monitor internal controls."),
    Question("MEA02.02", "MEA02", "Is the effectiveness of business process controls reviewed?",
             "MEA02.02 Review business process controls effectiveness."),
    Question("MEA02.03", "MEA02", "Are control self-assessments performed?",
             "MEA02.03 Perform control self-assessments."),
    Question("MEA02.04", "MEA02", "Are control deficiencies identified and reported?",
             "MEA02.04 Identify and report control deficiencies."),
    Question("MEA02.05", "MEA02", "Is it ensured that assurance providers are independent and qualified?",
             "MEA02.05 Ensure that assurance providers are independent and qualified."),
    Question("MEA02.06", "MEA02", "Are assurance initiatives planned?",
             "MEA02.06 Plan assurance initiatives."),
    Question("MEA02.07", "MEA02", "Is the scope of assurance initiatives defined?",
             "MEA02.07 Scope assurance initiatives."),
    Question("MEA02.08", "MEA02", "Are assurance initiatives executed?",
             "MEA02.08 Execute assurance initiatives."),
    # MEA03: Monitor, Evaluate and Assess Conformance with External Requirements
    Question("MEA03.01", "MEA03", "Are external compliance requirements identified?",
             "MEA03.01 Identify external compliance requirements."),
    Question("MEA03.02", "MEA03", "Is the response to external requirements optimised?",
             "MEA03.02 Optimise response to external requirements."),
    Question("MEA03.03", "MEA03", "Is external compliance confirmed?",
             "MEA03.03 Confirm external compliance."),
    Question("MEA03.04", "MEA03", "Is assurance of external compliance obtained?",
             "MEA03.04 Obtain assurance of external compliance."),
)

DEFAULT_CATALOG = ReferenceCatalog(MEA_DOMAINS, MEA_QUESTIONS, MATURITY_LEVELS)


def get_catalog() -> ReferenceCatalog:
    """Return the MEA reference catalog."""
    return DEFAULT_CATALOG
