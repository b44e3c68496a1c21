from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db import Base


class FeatureRequest(Base):
    __tablename__ = "feature_requests"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    # Set once at creation; nothing updates it afterwards
    owner_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False)
    created_at: Mapped[str] = mapped_column(String, nullable=False)
    updated_at: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        Index("idx_feature_requests_status", "status"),
        Index("idx_feature_requests_owner", "owner_id"),
    )


class Upvote(Base):
    __tablename__ = "upvotes"

    # Composite primary key: at most one upvote per user per request
    user_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), primary_key=True)
    request_id: Mapped[str] = mapped_column(
        String, ForeignKey("feature_requests.id"), primary_key=True
    )
    created_at: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (Index("idx_upvotes_request", "request_id"),)
