from backend.app.schemas.feature import (
    FeatureCreate,
    FeatureListResponse,
    FeatureQuery,
    FeatureResponse,
    StatusUpdate,
)
from backend.app.schemas.user import SessionResponse, UserLogin, UserRegister, UserResponse

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "SessionResponse",
    "FeatureCreate",
    "FeatureQuery",
    "StatusUpdate",
    "FeatureResponse",
    "FeatureListResponse",
]
