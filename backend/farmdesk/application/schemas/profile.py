"""Pydantic DTOs for the profile and settings endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProfileResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    full_name: str | None
    username: str | None
    avatar_url: str | None
    farm_name: str | None
    phone: str | None
    location: str | None
    bio: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """Schema for updating profile fields — all fields optional."""

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(None, max_length=255)
    username: str | None = Field(None, max_length=100)
    avatar_url: str | None = Field(None, max_length=1024)
    farm_name: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    location: str | None = Field(None, max_length=255)
    bio: str | None = None


class SettingsSchema(BaseModel):
    notifications: dict[str, Any]
    preferences: dict[str, Any]
    privacy: dict[str, Any]


class SettingsUpdate(BaseModel):
    """Partial settings update — each section is merged key by key."""

    model_config = ConfigDict(extra="forbid")

    notifications: dict[str, Any] | None = None
    preferences: dict[str, Any] | None = None
    privacy: dict[str, Any] | None = None
