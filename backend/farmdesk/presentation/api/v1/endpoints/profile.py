"""Profile and settings endpoints for the authenticated caller."""

from fastapi import APIRouter, Depends

from farmdesk.application.schemas import (
    ProfileResponse,
    ProfileUpdate,
    SettingsSchema,
    SettingsUpdate,
)
from farmdesk.application.services import ProfileService
from farmdesk.infrastructure.auth import get_current_user_id
from farmdesk.infrastructure.dependencies import get_profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    profile = await service.get_profile(user_id)
    return ProfileResponse.model_validate(profile)


@router.put("", response_model=ProfileResponse)
async def update_profile(
    data: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Partial update: only the fields present in the body change."""
    profile = await service.update_profile(user_id, data.model_dump(exclude_unset=True))
    return ProfileResponse.model_validate(profile)


@router.get("/settings", response_model=SettingsSchema)
async def get_settings(
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> SettingsSchema:
    """Stored settings merged over the defaults."""
    return SettingsSchema(**await service.get_settings(user_id))


@router.put("/settings", response_model=SettingsSchema)
async def update_settings(
    data: SettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
) -> SettingsSchema:
    settings = await service.update_settings(user_id, data.model_dump(exclude_unset=True))
    return SettingsSchema(**settings)
