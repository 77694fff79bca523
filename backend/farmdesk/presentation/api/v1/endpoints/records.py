"""Generic owner-scoped CRUD over every resource table.

``/rest/{resource}`` serves crops, parcels, inventory, transactions,
notifications, crop_attachments, weather_data, crop_recommendations,
crop_analytics (read-only) and user_portfolios. Every query is filtered to
the authenticated caller.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, Response, status

from farmdesk.application.schemas import parse_filters
from farmdesk.application.services import RecordService
from farmdesk.domain.exceptions import NotFoundError, ValidationError
from farmdesk.infrastructure.auth import get_current_user_id
from farmdesk.infrastructure.dependencies import get_record_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/rest", tags=["Records"])

_PAGING_PARAMS = {"skip", "limit"}


@router.get("/{resource}")
async def list_records(
    request: Request,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    user_id: str = Depends(get_current_user_id),
    service: RecordService = Depends(get_record_service),
) -> list[dict[str, Any]]:
    """List the caller's rows, newest first. Other query params are equality filters."""
    raw_filters = {
        key: value for key, value in request.query_params.items() if key not in _PAGING_PARAMS
    }
    try:
        filters = parse_filters(service.spec, raw_filters)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)

    records = await service.list_records(user_id, filters=filters, skip=skip, limit=limit)
    return [r.to_dict() for r in records]


@router.get("/{resource}/{record_id}")
async def get_record(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RecordService = Depends(get_record_service),
) -> dict[str, Any]:
    try:
        record = await service.get_record(user_id, record_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return record.to_dict()


@router.post("/{resource}", status_code=status.HTTP_201_CREATED)
async def create_record(
    payload: dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    service: RecordService = Depends(get_record_service),
) -> dict[str, Any]:
    """Insert a row owned by the caller; returns it with id and timestamps."""
    try:
        record = await service.create_record(user_id, payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    return record.to_dict()


@router.patch("/{resource}/{record_id}")
async def update_record(
    record_id: str,
    payload: dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
    service: RecordService = Depends(get_record_service),
) -> dict[str, Any]:
    try:
        record = await service.update_record(user_id, record_id, payload)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return record.to_dict()


@router.delete("/{resource}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(
    record_id: str,
    user_id: str = Depends(get_current_user_id),
    service: RecordService = Depends(get_record_service),
) -> Response:
    """Delete a row. Deleting an id that is already gone also answers 204."""
    if not service.spec.writable:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail=f"{service.spec.label} is read-only",
        )
    await service.delete_record(user_id, record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
