# mea_dashboard/infrastructure/repositories_assessment.py
from __future__ import annotations

import builtins
from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .logging import log_database_operation as log_op
from .models import AssessmentORM
from .repositories_base import BaseRepository as GenericBaseRepository


class AssessmentRepo(GenericBaseRepository[AssessmentORM]):
    """Owner-scoped access to stored assessments inside one namespace."""

    model = AssessmentORM

    def __init__(self, session: Session, namespace: str, owner_id: str):
        super().__init__(session)
        self.namespace = namespace
        self.owner_id = owner_id

    def _scope(self) -> tuple[Any, ...]:
        return (
            AssessmentORM.namespace == self.namespace,
            AssessmentORM.owner_id == self.owner_id,
        )

    # -------- Read --------

    @log_op("assessment.get")
    def get(self, id_: Any) -> AssessmentORM | None:
        obj = super().get(id_)
        if obj is None or obj.namespace != self.namespace or obj.owner_id != self.owner_id:
            return None
        return obj

    @log_op("assessment.list")
    def list_newest_first(self, limit: int | None = None) -> builtins.list[AssessmentORM]:
        order = [AssessmentORM.created_at.desc(), AssessmentORM.id.desc()]
        return super().list(*self._scope(), order_by=order, limit=limit)

    @log_op("assessment.count")
    def count_owned(self) -> int:
        return super().count(*self._scope())

    @log_op("assessment.latest_timestamp")
    def latest_timestamp(self) -> datetime | None:
        """Newest ``created_at`` across the whole namespace, any owner."""
        stmt = select(func.max(AssessmentORM.created_at)).where(
            AssessmentORM.namespace == self.namespace
        )
        return self.s.scalar(stmt)

    # -------- Write --------

    @log_op("assessment.create")
    def create(self, **fields: Any) -> AssessmentORM:
        fields.setdefault("namespace", self.namespace)
        fields.setdefault("owner_id", self.owner_id)
        return super().create(**fields)
