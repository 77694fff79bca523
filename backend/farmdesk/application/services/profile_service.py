"""Application service for the user profile and its settings blob."""

import logging
from typing import Any

from farmdesk.application.interfaces import ProfileRepository
from farmdesk.domain.entities import Profile
from farmdesk.domain.entities.profile import SETTINGS_SECTIONS

logger = logging.getLogger(__name__)


class ProfileService:
    """Profile reads fall back to an unsaved blank profile; writes upsert."""

    def __init__(self, repository: ProfileRepository):
        self._repository = repository

    async def get_profile(self, user_id: str) -> Profile:
        return await self._repository.get(user_id) or Profile(id=user_id)

    async def update_profile(self, user_id: str, changes: dict[str, Any]) -> Profile:
        profile = await self.get_profile(user_id)
        profile.update(changes)
        return await self._repository.save(profile)

    async def get_settings(self, user_id: str) -> dict[str, dict[str, Any]]:
        profile = await self.get_profile(user_id)
        return profile.effective_settings()

    async def update_settings(
        self, user_id: str, updates: dict[str, dict[str, Any] | None]
    ) -> dict[str, dict[str, Any]]:
        """Merge each provided section key by key over the current settings."""
        profile = await self.get_profile(user_id)
        current = profile.effective_settings()
        changes = {
            section: {**current[section], **values}
            for section, values in updates.items()
            if section in SETTINGS_SECTIONS and values is not None
        }
        profile.update(changes)
        saved = await self._repository.save(profile)
        logger.info("Settings updated for %s: %s", user_id, ", ".join(changes) or "no changes")
        return saved.effective_settings()
