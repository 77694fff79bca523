"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from farmdesk.presentation.api.v1.endpoints.health import router as health_router
from farmdesk.presentation.api.v1.endpoints.records import router as records_router
from farmdesk.presentation.api.v1.endpoints.realtime import router as realtime_router
from farmdesk.presentation.api.v1.endpoints.attachments import router as attachments_router
from farmdesk.presentation.api.v1.endpoints.profile import router as profile_router
from farmdesk.presentation.api.v1.endpoints.functions import router as functions_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(records_router)
router.include_router(realtime_router)
router.include_router(attachments_router)
router.include_router(profile_router)
router.include_router(functions_router)
