"""Realtime change feed — one SSE stream per authenticated caller."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from farmdesk.application.services import RealtimeHub
from farmdesk.infrastructure.auth import get_current_user_id
from farmdesk.infrastructure.dependencies import get_realtime_hub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Realtime"])


@router.get("/realtime")
async def change_stream(
    user_id: str = Depends(get_current_user_id),
    hub: RealtimeHub = Depends(get_realtime_hub),
) -> StreamingResponse:
    """SSE endpoint for row changes on the caller's tables.

    Clients receive one ``ready`` event, then a ``change`` event
    (table, operation, record_id, user_id, occurred_at) per committed
    INSERT, UPDATE or DELETE.
    """
    logger.info("Realtime subscriber connected: %s", user_id)
    return StreamingResponse(
        hub.subscribe(user_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
