"""SQLAlchemy ORM models for the resource tables.

Every resource table has the same shape: owner, JSON field values and
timestamps. The per-resource classes only differ in their table name.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from farmdesk.domain.entities import ResourceName
from farmdesk.infrastructure.database.base import Base


class RecordColumnsMixin:
    """Columns shared by every resource table."""

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, user='{self.user_id}')>"


class CropModel(RecordColumnsMixin, Base):
    __tablename__ = "crops"


class ParcelModel(RecordColumnsMixin, Base):
    __tablename__ = "parcels"


class InventoryItemModel(RecordColumnsMixin, Base):
    __tablename__ = "inventory"


class TransactionModel(RecordColumnsMixin, Base):
    __tablename__ = "transactions"


class NotificationModel(RecordColumnsMixin, Base):
    __tablename__ = "notifications"


class CropAttachmentModel(RecordColumnsMixin, Base):
    __tablename__ = "crop_attachments"


class WeatherDataModel(RecordColumnsMixin, Base):
    __tablename__ = "weather_data"


class CropRecommendationModel(RecordColumnsMixin, Base):
    __tablename__ = "crop_recommendations"


class CropAnalyticsModel(RecordColumnsMixin, Base):
    __tablename__ = "crop_analytics"


class UserPortfolioModel(RecordColumnsMixin, Base):
    __tablename__ = "user_portfolios"


RECORD_MODELS: dict[ResourceName, type[RecordColumnsMixin]] = {
    ResourceName.CROPS: CropModel,
    ResourceName.PARCELS: ParcelModel,
    ResourceName.INVENTORY: InventoryItemModel,
    ResourceName.TRANSACTIONS: TransactionModel,
    ResourceName.NOTIFICATIONS: NotificationModel,
    ResourceName.CROP_ATTACHMENTS: CropAttachmentModel,
    ResourceName.WEATHER_DATA: WeatherDataModel,
    ResourceName.CROP_RECOMMENDATIONS: CropRecommendationModel,
    ResourceName.CROP_ANALYTICS: CropAnalyticsModel,
    ResourceName.USER_PORTFOLIOS: UserPortfolioModel,
}
