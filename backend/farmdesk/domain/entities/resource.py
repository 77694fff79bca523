"""Resource catalogue — the owner-scoped tables FarmDesk exposes.

Each resource is a flat table of records. A ``ResourceSpec`` describes the
caller-writable fields of one table so that both the API validation layer
and the client know what a well-formed row looks like.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ResourceName(str, Enum):
    """Logical resource collections (value = backend table name)."""

    CROPS = "crops"
    PARCELS = "parcels"
    INVENTORY = "inventory"
    TRANSACTIONS = "transactions"
    NOTIFICATIONS = "notifications"
    CROP_ATTACHMENTS = "crop_attachments"
    WEATHER_DATA = "weather_data"
    CROP_RECOMMENDATIONS = "crop_recommendations"
    CROP_ANALYTICS = "crop_analytics"
    USER_PORTFOLIOS = "user_portfolios"


class FieldType(str, Enum):
    """Value types a record field may hold."""

    TEXT = "text"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DATE = "date"
    JSON = "json"


@dataclass(frozen=True)
class FieldSpec:
    """A single column of a resource.

    ``managed`` columns are written by the backend only (e.g. the storage key
    of an uploaded attachment); callers can read them but never set them.
    """

    name: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    default: Any = None
    choices: tuple[str, ...] | None = None
    minimum: float | None = None
    maximum: float | None = None
    managed: bool = False


@dataclass(frozen=True)
class ResourceSpec:
    """Shape of one resource table."""

    name: ResourceName
    label: str  # singular, human-friendly ("crop", "inventory item")
    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)
    writable: bool = True

    @property
    def field_names(self) -> set[str]:
        return {f.name for f in self.fields}

    @property
    def caller_fields(self) -> tuple[FieldSpec, ...]:
        """Fields a caller may send on insert or patch."""
        return tuple(f for f in self.fields if not f.managed)

    @property
    def required_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.required]

    def get_field(self, name: str) -> FieldSpec | None:
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None


# Columns every record carries; never accepted from callers.
SYSTEM_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})

CROP_STATUSES = ("planned", "planted", "growing", "harvested")
TRANSACTION_TYPES = ("income", "expense")

_T = FieldType

RESOURCE_SPECS: dict[ResourceName, ResourceSpec] = {
    ResourceName.CROPS: ResourceSpec(
        name=ResourceName.CROPS,
        label="crop",
        fields=(
            FieldSpec("name", required=True),
            FieldSpec("variety"),
            FieldSpec("planting_date", _T.DATE),
            FieldSpec("expected_harvest_date", _T.DATE),
            FieldSpec("actual_harvest_date", _T.DATE),
            FieldSpec("area_planted", _T.NUMBER, minimum=0),
            FieldSpec("status", default="planned", choices=CROP_STATUSES),
            FieldSpec("notes"),
        ),
    ),
    ResourceName.PARCELS: ResourceSpec(
        name=ResourceName.PARCELS,
        label="parcel",
        fields=(
            FieldSpec("name", required=True),
            FieldSpec("area", _T.NUMBER, required=True, minimum=0),
            FieldSpec("soil_type", required=True),
            FieldSpec("location"),
            FieldSpec("coordinates"),
            FieldSpec("crops", _T.JSON),
            FieldSpec("status", default="Fallow"),
            FieldSpec("notes"),
        ),
    ),
    ResourceName.INVENTORY: ResourceSpec(
        name=ResourceName.INVENTORY,
        label="inventory item",
        fields=(
            FieldSpec("name", required=True),
            FieldSpec("category", required=True),
            FieldSpec("unit", required=True),
            FieldSpec("quantity", _T.NUMBER, default=0, minimum=0),
            FieldSpec("min_threshold", _T.NUMBER, default=0, minimum=0),
            FieldSpec("price", _T.NUMBER, minimum=0),
            FieldSpec("supplier"),
            FieldSpec("location"),
            FieldSpec("expiry_date", _T.DATE),
        ),
    ),
    ResourceName.TRANSACTIONS: ResourceSpec(
        name=ResourceName.TRANSACTIONS,
        label="transaction",
        fields=(
            FieldSpec("type", required=True, choices=TRANSACTION_TYPES),
            FieldSpec("amount", _T.NUMBER, required=True, minimum=0),
            FieldSpec("category", required=True),
            FieldSpec("description", required=True),
            FieldSpec("date", _T.DATE, required=True),
            FieldSpec("crop"),
        ),
    ),
    ResourceName.NOTIFICATIONS: ResourceSpec(
        name=ResourceName.NOTIFICATIONS,
        label="notification",
        fields=(
            FieldSpec("title", required=True),
            FieldSpec("message", required=True),
            FieldSpec("type", required=True),
            FieldSpec("is_read", _T.BOOLEAN, default=False),
            FieldSpec("scheduled_for"),
            FieldSpec("sent_at"),
        ),
    ),
    ResourceName.CROP_ATTACHMENTS: ResourceSpec(
        name=ResourceName.CROP_ATTACHMENTS,
        label="attachment",
        fields=(
            FieldSpec("file_name", required=True),
            FieldSpec("file_path", managed=True),
            FieldSpec("file_type", required=True),
            FieldSpec("file_size", _T.INTEGER, minimum=0, managed=True),
            FieldSpec("crop_id"),
            FieldSpec("description"),
        ),
    ),
    ResourceName.WEATHER_DATA: ResourceSpec(
        name=ResourceName.WEATHER_DATA,
        label="weather observation",
        fields=(
            FieldSpec("location", required=True),
            FieldSpec("forecast_date", _T.DATE, required=True),
            FieldSpec("temperature", _T.NUMBER),
            FieldSpec("humidity", _T.NUMBER),
            FieldSpec("rainfall", _T.NUMBER),
            FieldSpec("wind_speed", _T.NUMBER),
            FieldSpec("conditions"),
        ),
    ),
    ResourceName.CROP_RECOMMENDATIONS: ResourceSpec(
        name=ResourceName.CROP_RECOMMENDATIONS,
        label="recommendation",
        fields=(
            FieldSpec("recommended_crop", required=True),
            FieldSpec("reason", required=True),
            FieldSpec("confidence_score", _T.NUMBER, minimum=0, maximum=1),
            FieldSpec("weather_data", _T.JSON),
            FieldSpec("soil_data", _T.JSON),
        ),
    ),
    ResourceName.CROP_ANALYTICS: ResourceSpec(
        name=ResourceName.CROP_ANALYTICS,
        label="analytics snapshot",
        fields=(
            FieldSpec("total_crops", _T.INTEGER),
            FieldSpec("total_area", _T.NUMBER),
            FieldSpec("crops_by_status", _T.JSON),
            FieldSpec("monthly_plantings", _T.JSON),
        ),
        writable=False,
    ),
    ResourceName.USER_PORTFOLIOS: ResourceSpec(
        name=ResourceName.USER_PORTFOLIOS,
        label="portfolio holding",
        fields=(
            FieldSpec("symbol", required=True),
            FieldSpec("shares", _T.NUMBER, required=True, minimum=0),
            FieldSpec("average_cost", _T.NUMBER, required=True, minimum=0),
        ),
    ),
}

# Deletion order used by the bulk clear (children before parents).
CLEARABLE_TABLES: tuple[ResourceName, ...] = (
    ResourceName.CROP_ATTACHMENTS,
    ResourceName.CROP_RECOMMENDATIONS,
    ResourceName.CROP_ANALYTICS,
    ResourceName.CROPS,
    ResourceName.INVENTORY,
    ResourceName.TRANSACTIONS,
    ResourceName.PARCELS,
    ResourceName.NOTIFICATIONS,
    ResourceName.WEATHER_DATA,
    ResourceName.USER_PORTFOLIOS,
)


def get_resource_spec(resource: ResourceName | str) -> ResourceSpec:
    """Look up a spec by enum member or table name."""
    return RESOURCE_SPECS[ResourceName(resource)]
