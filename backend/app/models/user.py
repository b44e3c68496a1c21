from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False, default="user")  # "user" or "admin"
    name: Mapped[str | None] = mapped_column(String, nullable=True, default=None)
    # Timestamps are stored as ISO 8601 strings (not datetime columns) throughout
    # the schema. UTC isoformat strings sort lexicographically in time order,
    # which the timeframe filter relies on.
    created_at: Mapped[str] = mapped_column(String, nullable=False)
