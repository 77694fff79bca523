"""Crop recommendation use case — completion API with deterministic fallbacks.

Failure policy of the completion call:

* HTTP 429 (rate limited)      → rate-limit fallback list
* 2xx with unparseable content → parse fallback list
* anything else                → UpstreamServiceError propagates to the caller

Every returned recommendation is persisted to ``crop_recommendations``.
"""

import json
import logging
import re
from typing import Any

from farmdesk.application.interfaces import ChatProvider, WeatherProvider
from farmdesk.application.services.record_service import RecordService
from farmdesk.domain.entities import (
    ChatMessage,
    CropRecommendation,
    RecommendationRequest,
)
from farmdesk.domain.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

RECOMMENDATION_COUNT = 3

SYSTEM_PROMPT = (
    "You are an expert agricultural advisor specializing in Indian farming. "
    "Always respond with valid JSON format."
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def build_prompt(request: RecommendationRequest, weather: dict[str, Any]) -> str:
    current = weather.get("current") or {}
    condition = (current.get("condition") or {}).get("text", "Unknown")
    temperature = current.get("temp_c", "Unknown")
    return f"""As an agricultural expert, recommend the best crops to plant based on:
Location: {request.location}
Current Weather: {condition}, {temperature}°C
Soil Type: {request.soil_type}
Previous Crops: {request.previous_crops_text or 'None specified'}
Season: {request.season}

Please provide exactly {RECOMMENDATION_COUNT} specific crop recommendations. Format your response as a valid JSON array with objects containing:
- crop: the name of the crop
- reason: detailed explanation (2-3 sentences)
- confidence: a number between 0 and 1

Example format:
[
  {{"crop": "Rice", "reason": "Suitable for monsoon season with high water availability.", "confidence": 0.85}},
  {{"crop": "Wheat", "reason": "Good for winter cultivation in this soil type.", "confidence": 0.78}}
]"""


def rate_limited_fallback(request: RecommendationRequest) -> list[CropRecommendation]:
    previous = request.previous_crops_text or "previous crops"
    return [
        CropRecommendation(
            crop="Rice",
            reason=(
                f"Suitable for {request.season} season in {request.location}. Rice is "
                f"well-adapted to {request.soil_type} soil conditions and is a staple crop "
                "in the region."
            ),
            confidence=0.75,
        ),
        CropRecommendation(
            crop="Wheat",
            reason=(
                f"Good alternative for crop rotation after {previous}. Wheat performs well "
                "in diverse soil types and weather conditions."
            ),
            confidence=0.70,
        ),
        CropRecommendation(
            crop="Vegetables",
            reason=(
                "High-value vegetables are suitable for local market conditions and provide "
                f"good returns in {request.location}."
            ),
            confidence=0.65,
        ),
    ]


def unparseable_fallback() -> list[CropRecommendation]:
    return [
        CropRecommendation(
            crop="Rice",
            reason="Suitable for the specified location and season with good water management.",
            confidence=0.7,
        ),
        CropRecommendation(
            crop="Wheat",
            reason="Good alternative crop for rotation and soil health maintenance.",
            confidence=0.65,
        ),
        CropRecommendation(
            crop="Vegetables",
            reason="High-value crops suitable for local market conditions.",
            confidence=0.6,
        ),
    ]


def parse_recommendations(content: str) -> list[CropRecommendation]:
    """Parse model output into recommendations; returns [] when nothing usable is found."""
    text = _FENCE_RE.sub("", content.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return []

    if isinstance(data, dict):
        data = data.get("recommendations", [data])
    if not isinstance(data, list):
        return []

    parsed: list[CropRecommendation] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        crop = str(item.get("crop") or "").strip()
        reason = str(item.get("reason") or "").strip()
        if not crop or not reason:
            continue
        try:
            confidence = float(item.get("confidence", 0.5))
        except (TypeError, ValueError):
            confidence = 0.5
        parsed.append(CropRecommendation(crop=crop, reason=reason, confidence=confidence))
    return parsed[:RECOMMENDATION_COUNT]


def user_facing_error(exc: Exception) -> str:
    """Short message for the function's ``{"error": ...}`` body."""
    if isinstance(exc, UpstreamServiceError):
        if exc.is_rate_limited:
            return "AI service is temporarily busy. Please try again in a few minutes."
        if exc.status_code in (401, 403) or "api key" in exc.message.lower():
            return "AI service configuration issue. Please contact support."
    return "Failed to generate recommendations"


class RecommendationService:
    """Generates, normalises and stores crop recommendations for a user."""

    def __init__(
        self,
        records: RecordService,
        chat_provider: ChatProvider | None,
        model: str,
        weather_provider: WeatherProvider | None = None,
    ):
        self._records = records
        self._provider = chat_provider
        self._model = model
        self._weather = weather_provider

    async def recommend(
        self, user_id: str, request: RecommendationRequest
    ) -> list[CropRecommendation]:
        provider = self._provider
        if provider is None:
            raise UpstreamServiceError("completion", 500, "Completion API key not configured")

        weather = await self._lookup_weather(request.location)
        recommendations = await self._generate(provider, request, weather)

        for rec in recommendations:
            await self._records.create_record(
                user_id,
                {
                    "recommended_crop": rec.crop,
                    "reason": rec.reason,
                    "confidence_score": rec.confidence,
                    "weather_data": weather,
                    "soil_data": {"type": request.soil_type, "location": request.location},
                },
            )
        logger.info("Stored %d recommendations for user %s", len(recommendations), user_id)
        return recommendations

    async def _generate(
        self,
        provider: ChatProvider,
        request: RecommendationRequest,
        weather: dict[str, Any],
    ) -> list[CropRecommendation]:
        messages = [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=build_prompt(request, weather)),
        ]
        try:
            result = await provider.complete(
                messages, self._model, temperature=0.7, max_tokens=1000
            )
        except UpstreamServiceError as exc:
            if exc.is_rate_limited:
                logger.warning("Completion API rate limited, using fallback recommendations")
                return rate_limited_fallback(request)
            logger.error("Completion API error: %s", exc)
            raise

        recommendations = parse_recommendations(result.content)
        if not recommendations:
            logger.warning("Could not parse completion output, using fallback recommendations")
            return unparseable_fallback()
        return recommendations

    async def _lookup_weather(self, location: str) -> dict[str, Any]:
        """Current weather for the prompt; failures only degrade the prompt."""
        if self._weather is None:
            return {}
        try:
            return await self._weather.fetch_current(location)
        except UpstreamServiceError as exc:
            logger.info("Weather lookup failed, continuing without weather data: %s", exc)
            return {}
