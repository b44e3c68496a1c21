from backend.app.models.user import User
from backend.app.models.feature import FeatureRequest, Upvote

__all__ = [
    "User",
    "FeatureRequest",
    "Upvote",
]
