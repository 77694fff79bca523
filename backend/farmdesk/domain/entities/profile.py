"""Domain entity for the per-user profile and settings blob."""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

DEFAULT_NOTIFICATION_SETTINGS: dict[str, Any] = {
    "email": True,
    "push": True,
    "sound": True,
    "cropUpdates": True,
    "weatherAlerts": True,
    "marketInsights": True,
    "lowStock": True,
}

DEFAULT_PREFERENCES: dict[str, Any] = {
    "language": "en",
    "timezone": "UTC",
    "currency": "INR",
    "theme": "light",
    "dateFormat": "DD/MM/YYYY",
}

DEFAULT_PRIVACY: dict[str, Any] = {
    "profileVisibility": "private",
    "dataSharing": False,
    "analytics": True,
}

# Free-text columns a user may edit directly.
PROFILE_TEXT_FIELDS = (
    "full_name",
    "username",
    "avatar_url",
    "farm_name",
    "phone",
    "location",
    "bio",
)

SETTINGS_SECTIONS = ("notifications", "preferences", "privacy")


@dataclass
class Profile:
    """One row per user; ``id`` is the user id."""

    id: str
    full_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    farm_name: str | None = None
    phone: str | None = None
    location: str | None = None
    bio: str | None = None
    preferences: dict[str, Any] = field(default_factory=dict)
    notifications: dict[str, Any] = field(default_factory=dict)
    privacy: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def update(self, changes: dict[str, Any]) -> None:
        """Apply free-text and settings changes and refresh updated_at."""
        for key, value in changes.items():
            if key in PROFILE_TEXT_FIELDS or key in SETTINGS_SECTIONS:
                setattr(self, key, value)
        self.updated_at = datetime.now(timezone.utc)

    def reset(self) -> None:
        """Blank every user-entered field while keeping the row itself."""
        for key in PROFILE_TEXT_FIELDS:
            setattr(self, key, None)
        self.preferences = {}
        self.notifications = {}
        self.privacy = {}
        self.updated_at = datetime.now(timezone.utc)

    def effective_settings(self) -> dict[str, dict[str, Any]]:
        """Stored settings merged over the defaults."""
        return {
            "notifications": {**DEFAULT_NOTIFICATION_SETTINGS, **(self.notifications or {})},
            "preferences": {**DEFAULT_PREFERENCES, **(self.preferences or {})},
            "privacy": {**DEFAULT_PRIVACY, **(self.privacy or {})},
        }


def default_settings() -> dict[str, dict[str, Any]]:
    return {
        "notifications": copy.deepcopy(DEFAULT_NOTIFICATION_SETTINGS),
        "preferences": copy.deepcopy(DEFAULT_PREFERENCES),
        "privacy": copy.deepcopy(DEFAULT_PRIVACY),
    }
