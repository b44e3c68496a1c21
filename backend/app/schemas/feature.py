"""Feature request schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

StatusValue = Literal["pending", "planned", "completed", "rejected"]
Timeframe = Literal["day", "week", "month", "all"]
SortOrder = Literal["top", "newest"]


class FeatureCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=5000)


class StatusUpdate(BaseModel):
    # Checked against the fixed status set by the access policy
    status: str


class FeatureQuery(BaseModel):
    status: StatusValue | None = None
    timeframe: Timeframe = "all"
    search: str | None = None
    mine: bool = False
    sort: SortOrder = "top"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class FeatureResponse(BaseModel):
    id: str
    title: str
    description: str
    status: str
    owner_id: str
    created_at: str
    updated_at: str
    upvote_count: int = 0
    has_upvoted: bool = False
    is_owner: bool = False


class FeatureListResponse(BaseModel):
    requests: list[FeatureResponse]
    total: int
    page: int
    total_pages: int
    has_more: bool
