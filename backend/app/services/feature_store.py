"""SQLAlchemy-backed storage for feature requests and upvotes."""

import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import case, delete, desc, func, literal, or_, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.feature import FeatureRequest, Upvote
from backend.app.schemas.feature import FeatureQuery

TIMEFRAMES = {
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
}


class UpvoteExists(Exception):
    """The (user, request) upvote row was already present."""


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class FeatureStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def find_resource(self, request_id: str) -> FeatureRequest | None:
        result = await self.db.execute(
            select(FeatureRequest).where(FeatureRequest.id == request_id)
        )
        return result.scalar_one_or_none()

    async def count_upvotes(self, request_id: str) -> int:
        count = await self.db.scalar(
            select(func.count()).select_from(Upvote).where(Upvote.request_id == request_id)
        )
        return count or 0

    async def find_upvote(self, user_id: str, request_id: str) -> Upvote | None:
        result = await self.db.execute(
            select(Upvote).where(Upvote.user_id == user_id, Upvote.request_id == request_id)
        )
        return result.scalar_one_or_none()

    async def create_upvote(self, user_id: str, request_id: str) -> Upvote:
        """Insert an upvote atomically.

        Raises ``UpvoteExists`` when the row was already there, including
        when a concurrent request inserted it first.
        """
        stmt = (
            sqlite_insert(Upvote)
            .values(user_id=user_id, request_id=request_id, created_at=_now())
            .on_conflict_do_nothing(index_elements=["user_id", "request_id"])
        )
        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            raise UpvoteExists(f"user {user_id} already upvoted {request_id}")
        return await self.find_upvote(user_id, request_id)

    async def delete_upvote(self, user_id: str, request_id: str) -> None:
        await self.db.execute(
            delete(Upvote).where(Upvote.user_id == user_id, Upvote.request_id == request_id)
        )

    async def delete_resource_and_upvotes(self, request_id: str) -> None:
        # Both statements run in the session's transaction; get_db commits
        # them together or rolls both back.
        await self.db.execute(delete(Upvote).where(Upvote.request_id == request_id))
        await self.db.execute(delete(FeatureRequest).where(FeatureRequest.id == request_id))
        await self.db.flush()

    async def update_status(self, request_id: str, new_status: str) -> FeatureRequest:
        resource = await self.find_resource(request_id)
        resource.status = new_status
        resource.updated_at = _now()
        await self.db.flush()
        return resource

    async def create_resource(self, owner_id: str, title: str, description: str) -> FeatureRequest:
        now = _now()
        resource = FeatureRequest(
            id=str(uuid.uuid4()),
            title=title,
            description=description,
            status="pending",
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )
        self.db.add(resource)
        await self.db.flush()
        return resource

    async def list_resources(
        self, query: FeatureQuery, viewer_id: str | None
    ) -> tuple[list[tuple[FeatureRequest, int, int]], int]:
        """Return one page of ``(request, upvote_count, has_upvoted)`` rows and the total."""
        filters = []
        if query.status:
            filters.append(FeatureRequest.status == query.status)
        if query.timeframe in TIMEFRAMES:
            cutoff = (datetime.now(UTC) - TIMEFRAMES[query.timeframe]).isoformat()
            filters.append(FeatureRequest.created_at >= cutoff)
        if query.search and query.search.strip():
            pattern = _like_pattern(query.search.strip())
            filters.append(
                or_(
                    FeatureRequest.title.ilike(pattern, escape="\\"),
                    FeatureRequest.description.ilike(pattern, escape="\\"),
                )
            )
        if query.mine:
            filters.append(FeatureRequest.owner_id == viewer_id)

        upvote_count = func.count(Upvote.user_id).label("upvote_count")
        if viewer_id:
            has_upvoted = func.max(case((Upvote.user_id == viewer_id, 1), else_=0))
        else:
            has_upvoted = literal(0)

        stmt = (
            select(FeatureRequest, upvote_count, has_upvoted.label("has_upvoted"))
            .outerjoin(Upvote, FeatureRequest.id == Upvote.request_id)
            .where(*filters)
            .group_by(FeatureRequest.id)
        )
        if query.sort == "top":
            stmt = stmt.order_by(desc(upvote_count), desc(FeatureRequest.created_at))
        else:
            stmt = stmt.order_by(desc(FeatureRequest.created_at))
        stmt = stmt.offset((query.page - 1) * query.limit).limit(query.limit)

        result = await self.db.execute(stmt)
        rows = [tuple(row) for row in result.all()]

        total = await self.db.scalar(
            select(func.count()).select_from(FeatureRequest).where(*filters)
        )
        return rows, total or 0
