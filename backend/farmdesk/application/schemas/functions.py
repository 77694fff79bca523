"""Pydantic DTOs for the serverless-style function endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RecommendationRequestSchema(BaseModel):
    """Body of ``POST /functions/ai-crop-recommendations`` (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True)

    location: str = Field(..., min_length=1, examples=["Mumbai, Maharashtra"])
    soil_type: str = Field(..., min_length=1, alias="soilType", examples=["black"])
    season: str = Field(..., min_length=1, examples=["kharif"])
    previous_crops: list[str] = Field(default_factory=list, alias="previousCrops")


class RecommendationSchema(BaseModel):
    crop: str
    reason: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class RecommendationResponse(BaseModel):
    recommendations: list[RecommendationSchema]


class WeatherSyncRequest(BaseModel):
    """Body of ``POST /functions/weather-sync``."""

    location: str = Field(..., min_length=1, examples=["Pune"])


class WeatherSyncResponse(BaseModel):
    current: dict[str, Any]
    forecast: list[dict[str, Any]]


class TableClearResultSchema(BaseModel):
    table: str
    success: bool
    deleted: int | None = None
    error: str | None = None


class ClearDataResponse(BaseModel):
    """Per-table report of a bulk clear (camelCase ``clearedTables`` kept for clients)."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    results: list[TableClearResultSchema]
    cleared_tables: int = Field(..., serialization_alias="clearedTables")


class FunctionErrorResponse(BaseModel):
    error: str
    details: str | None = None
