"""Serverless-style function endpoints.

Failures answer HTTP 500 with ``{"error": message}``, which is the shape the
client's ``invoke`` expects from every function.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from farmdesk.application.schemas import (
    ClearDataResponse,
    RecommendationRequestSchema,
    RecommendationResponse,
    RecommendationSchema,
    TableClearResultSchema,
    WeatherSyncRequest,
    WeatherSyncResponse,
)
from farmdesk.application.services import (
    ClearDataService,
    RecommendationService,
    WeatherSyncService,
)
from farmdesk.application.services.recommendation_service import user_facing_error
from farmdesk.domain.entities import RecommendationRequest
from farmdesk.domain.exceptions import FarmDeskError, UpstreamServiceError
from farmdesk.infrastructure.auth import get_current_user_id
from farmdesk.infrastructure.dependencies import (
    get_clear_data_service,
    get_recommendation_service,
    get_weather_sync_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["Functions"])


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.post("/ai-crop-recommendations", response_model=RecommendationResponse)
async def generate_crop_recommendations(
    data: RecommendationRequestSchema,
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Generate three crop recommendations and store them for the caller.

    A rate-limited or unparseable completion still answers 200 with
    fallback recommendations; any other upstream failure answers 500.
    """
    request = RecommendationRequest(
        location=data.location,
        soil_type=data.soil_type,
        season=data.season,
        previous_crops=list(data.previous_crops),
    )
    try:
        recommendations = await service.recommend(user_id, request)
    except FarmDeskError as e:
        logger.error("Crop recommendation failed for %s: %s", user_id, e)
        return _error_response(user_facing_error(e))

    return RecommendationResponse(
        recommendations=[RecommendationSchema(**r.to_dict()) for r in recommendations]
    )


@router.post("/weather-sync", response_model=WeatherSyncResponse)
async def sync_weather(
    data: WeatherSyncRequest,
    user_id: str = Depends(get_current_user_id),
    service: WeatherSyncService = Depends(get_weather_sync_service),
):
    """Fetch current + forecast weather and store one row per day."""
    try:
        report = await service.sync(user_id, data.location)
    except UpstreamServiceError as e:
        logger.error("Weather sync failed for %s: %s", user_id, e)
        return _error_response(e.message)
    except FarmDeskError as e:
        logger.error("Weather sync failed for %s: %s", user_id, e)
        return _error_response(str(e))

    return WeatherSyncResponse(current=report.current, forecast=report.forecast)


@router.post("/clear-user-data", response_model=ClearDataResponse)
async def clear_user_data(
    user_id: str = Depends(get_current_user_id),
    service: ClearDataService = Depends(get_clear_data_service),
) -> ClearDataResponse:
    """Delete every row the caller owns, table by table, and reset the profile."""
    report = await service.clear(user_id)
    return ClearDataResponse(
        success=True,
        message=report.message,
        results=[TableClearResultSchema(**r.to_dict()) for r in report.results],
        cleared_tables=service.operation_count,
    )
