from .profile import ProfileModel
from .record_models import (
    RECORD_MODELS,
    CropAnalyticsModel,
    CropAttachmentModel,
    CropModel,
    CropRecommendationModel,
    InventoryItemModel,
    NotificationModel,
    ParcelModel,
    RecordColumnsMixin,
    TransactionModel,
    UserPortfolioModel,
    WeatherDataModel,
)

__all__ = [
    "ProfileModel",
    "RECORD_MODELS",
    "CropAnalyticsModel",
    "CropAttachmentModel",
    "CropModel",
    "CropRecommendationModel",
    "InventoryItemModel",
    "NotificationModel",
    "ParcelModel",
    "RecordColumnsMixin",
    "TransactionModel",
    "UserPortfolioModel",
    "WeatherDataModel",
]
