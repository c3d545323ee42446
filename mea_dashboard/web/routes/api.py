from __future__ import annotations

import asyncio
import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status

from mea_dashboard.application import api as app_api
from mea_dashboard.application.live import Subscription
from mea_dashboard.application.repository import AssessmentRepository
from mea_dashboard.domain.models import Assessment
from mea_dashboard.domain.reference import get_catalog
from mea_dashboard.infrastructure.exceptions import (
    AssessmentNotFoundError,
    PersistenceError,
    ValidationError,
)
from mea_dashboard.infrastructure.logging import get_logger
from mea_dashboard.utils.radar import make_domain_radar
from mea_dashboard.web.dependencies import get_repository
from mea_dashboard.web.schemas import (
    AssessmentCreated,
    AssessmentCreateRequest,
    AssessmentItem,
    AssessmentListResponse,
    CatalogResponse,
    DashboardResponse,
    ReportResponse,
)

router = APIRouter(prefix="/api")
logger = get_logger(__name__)


def _history_payload(items: list[Assessment], error: str | None = None) -> dict[str, Any]:
    response = AssessmentListResponse(
        items=[AssessmentItem.from_domain(a) for a in items], error=error
    )
    return response.model_dump(mode="json")


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/catalog", response_model=CatalogResponse)
def get_reference_catalog() -> CatalogResponse:
    return CatalogResponse.from_catalog(get_catalog())


@router.post(
    "/assessments", response_model=AssessmentCreated, status_code=status.HTTP_201_CREATED
)
def create_assessment(
    payload: AssessmentCreateRequest,
    repository: AssessmentRepository = Depends(get_repository),
) -> AssessmentCreated:
    try:
        new_id = app_api.submit_assessment(repository, payload.name, payload.answers)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.user_message
        ) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.user_message
        ) from exc
    return AssessmentCreated(id=new_id)


@router.get("/assessments", response_model=AssessmentListResponse)
def list_assessments(
    repository: AssessmentRepository = Depends(get_repository),
) -> AssessmentListResponse:
    history = app_api.load_assessment_history(repository)
    return AssessmentListResponse(
        items=[AssessmentItem.from_domain(a) for a in history.items],
        error=history.error,
    )


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    repository: AssessmentRepository = Depends(get_repository),
) -> DashboardResponse:
    summary = app_api.load_dashboard(repository)
    if summary.latest is None:
        return DashboardResponse(total=summary.total, error=summary.error)

    level = repository.catalog.level_for_score(summary.latest.overall_score)
    return DashboardResponse(
        latest=AssessmentItem.from_domain(summary.latest),
        maturity=f"Level {level.level}: {level.title}",
        total=summary.total,
        error=summary.error,
    )


@router.get("/assessments/{assessment_id}", response_model=AssessmentItem)
def get_assessment(
    assessment_id: str,
    repository: AssessmentRepository = Depends(get_repository),
) -> AssessmentItem:
    try:
        assessment = repository.get(assessment_id)
    except AssessmentNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.user_message) from exc
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.user_message
        ) from exc
    return AssessmentItem.from_domain(assessment)


@router.get("/assessments/{assessment_id}/report", response_model=ReportResponse)
def get_assessment_report(
    assessment_id: str,
    repository: AssessmentRepository = Depends(get_repository),
) -> ReportResponse:
    try:
        report = app_api.load_report(repository, assessment_id)
    except PersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.user_message
        ) from exc
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=AssessmentNotFoundError(assessment_id).user_message,
        )

    figure = make_domain_radar(report.chart_series)
    return ReportResponse.from_report(report, radar=json.loads(figure.to_json()))


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


@router.websocket("/assessments/live")
async def live_assessments(
    websocket: WebSocket,
    repository: AssessmentRepository = Depends(get_repository),
) -> None:
    """Stream the caller's history: once on connect, then after every create."""
    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    # listeners may run on a worker thread of another request
    def push(snapshot: list[Assessment]) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, _history_payload(snapshot))

    def fail(error: PersistenceError) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, _history_payload([], error.user_message))

    receiver = asyncio.create_task(_wait_for_disconnect(websocket))
    subscription: Subscription | None = None
    try:
        # the initial snapshot is a blocking query
        subscription = await asyncio.to_thread(repository.watch, push, fail)
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait(
                {getter, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            if getter not in done:
                getter.cancel()
                break
            await websocket.send_json(getter.result())
    except WebSocketDisconnect:
        pass
    finally:
        receiver.cancel()
        if subscription is not None:
            subscription.close()
        logger.info("Live assessment stream closed", extra={"user_id": repository.owner_id})
