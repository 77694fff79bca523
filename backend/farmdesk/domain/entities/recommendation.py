"""Domain entities for AI crop recommendations."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RecommendationRequest:
    """Farm context a recommendation is generated for."""

    location: str
    soil_type: str
    season: str
    previous_crops: list[str] = field(default_factory=list)

    @property
    def previous_crops_text(self) -> str:
        return ", ".join(self.previous_crops)


@dataclass
class CropRecommendation:
    """One suggested crop with its justification."""

    crop: str
    reason: str
    confidence: float

    def __post_init__(self) -> None:
        self.confidence = min(1.0, max(0.0, float(self.confidence)))

    def to_dict(self) -> dict[str, Any]:
        return {"crop": self.crop, "reason": self.reason, "confidence": self.confidence}
