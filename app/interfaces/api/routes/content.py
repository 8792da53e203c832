"""Routes for publishing group content and interacting with it."""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from app.application.use_cases.content import (
    FanOutResult,
    attend_event as attend_event_uc,
    create_event as create_event_uc,
    create_incident_report as create_incident_report_uc,
    create_news_story as create_news_story_uc,
    delete_content as delete_content_uc,
    record_content_view as record_content_view_uc,
)
from app.domain.errors import EngineError
from app.infrastructure.database import get_db
from app.infrastructure.notifications import NotificationPublisher
from app.interfaces.api.dependencies import get_current_user_id, get_publisher
from app.interfaces.api.routes_helpers import (
    operation_fields,
    operation_to_schema,
    to_http_exception,
)
from app.interfaces.api.schemas import (
    EventCreate,
    FanOutRead,
    IncidentReportCreate,
    NewsStoryCreate,
    OperationResultRead,
    ViewCountRead,
)

router = APIRouter(prefix="/groups/{group_id}", tags=["content"])

_KIND_PATTERN = "^(event|news|report)$"


def _fanout_to_schema(result: FanOutResult) -> FanOutRead:
    return FanOutRead(
        **operation_fields(result),
        content_id=result.value.id,
        kind=result.value.kind,
        opted_out=list(result.opted_out),
    )


@router.post("/events", response_model=FanOutRead, status_code=status.HTTP_201_CREATED)
def create_event(
    group_id: str,
    event_in: EventCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    """Publish an event; members who opted in to event notifications are told."""

    try:
        result = create_event_uc(
            db,
            group_id=group_id,
            author_id=user_id,
            title=event_in.title,
            message=event_in.message,
            start_date=event_in.start_date,
            end_date=event_in.end_date,
            image=event_in.image,
            publisher=publisher,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _fanout_to_schema(result)


@router.post("/news", response_model=FanOutRead, status_code=status.HTTP_201_CREATED)
def create_news_story(
    group_id: str,
    story_in: NewsStoryCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    try:
        result = create_news_story_uc(
            db,
            group_id=group_id,
            author_id=user_id,
            title=story_in.title,
            body=story_in.body,
            image=story_in.image,
            publisher=publisher,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _fanout_to_schema(result)


@router.post("/reports", response_model=FanOutRead, status_code=status.HTTP_201_CREATED)
def create_incident_report(
    group_id: str,
    report_in: IncidentReportCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    publisher: NotificationPublisher = Depends(get_publisher),
):
    """File an incident report; every other member is notified."""

    try:
        result = create_incident_report_uc(
            db,
            group_id=group_id,
            author_id=user_id,
            title=report_in.title,
            description=report_in.description,
            severity_tag=report_in.severity_tag,
            location_of_incident=report_in.location_of_incident,
            police_reference=report_in.police_reference,
            publisher=publisher,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return _fanout_to_schema(result)


@router.post("/events/{event_id}/attend", response_model=OperationResultRead)
def attend_event(
    group_id: str,
    event_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    try:
        result = attend_event_uc(db, group_id=group_id, event_id=event_id, user_id=user_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return operation_to_schema(result)


@router.post("/content/{kind}/{content_id}/views", response_model=ViewCountRead)
def record_view(
    group_id: str,
    content_id: str,
    kind: str = Path(..., pattern=_KIND_PATTERN),
    db: Session = Depends(get_db),
    _: str = Depends(get_current_user_id),
):
    try:
        views = record_content_view_uc(db, group_id=group_id, kind=kind, content_id=content_id)
    except EngineError as exc:
        raise to_http_exception(exc) from exc
    return ViewCountRead(views=views)


@router.delete("/content/{kind}/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_content(
    group_id: str,
    content_id: str,
    kind: str = Path(..., pattern=_KIND_PATTERN),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Remove a content item; its author or a group admin may do so."""

    try:
        delete_content_uc(
            db,
            group_id=group_id,
            kind=kind,
            content_id=content_id,
            acting_user_id=user_id,
        )
    except EngineError as exc:
        raise to_http_exception(exc) from exc
