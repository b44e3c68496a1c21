"""Feature request operations: access policy + storage.

Each function takes an already-resolved principal and returns an
``Outcome``. Denials come back as values; only unexpected storage errors
propagate.
"""

import logging
import math

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.schemas.feature import FeatureCreate, FeatureQuery
from backend.app.services.access import (
    Denial,
    Operation,
    Outcome,
    Principal,
    decide,
    project,
)
from backend.app.services.feature_store import FeatureStore, UpvoteExists

logger = logging.getLogger(__name__)


async def _view(store: FeatureStore, principal: Principal | None, resource) -> dict:
    upvote_count = await store.count_upvotes(resource.id)
    has_upvoted = False
    if principal is not None:
        has_upvoted = await store.find_upvote(principal.id, resource.id) is not None
    return project(principal, resource, upvote_count=upvote_count, has_upvoted=has_upvoted)


async def list_requests(
    db: AsyncSession, principal: Principal | None, query: FeatureQuery
) -> Outcome:
    if query.mine and principal is None:
        return Outcome.deny(Denial.UNAUTHENTICATED, "Sign in to see your own requests")

    store = FeatureStore(db)
    viewer_id = principal.id if principal else None
    rows, total = await store.list_resources(query, viewer_id)
    total_pages = max(1, math.ceil(total / query.limit))
    return Outcome.allow(
        {
            "requests": [
                project(principal, fr, upvote_count=count, has_upvoted=upvoted)
                for fr, count, upvoted in rows
            ],
            "total": total,
            "page": query.page,
            "total_pages": total_pages,
            "has_more": query.page < total_pages,
        }
    )


async def get_request(db: AsyncSession, principal: Principal | None, request_id: str) -> Outcome:
    store = FeatureStore(db)
    resource = await store.find_resource(request_id)
    decision = decide(principal, Operation.READ, resource)
    if not decision.ok:
        return decision
    return Outcome.allow(await _view(store, principal, resource))


async def create_request(
    db: AsyncSession, principal: Principal | None, data: FeatureCreate
) -> Outcome:
    decision = decide(principal, Operation.CREATE)
    if not decision.ok:
        return decision

    store = FeatureStore(db)
    resource = await store.create_resource(principal.id, data.title, data.description)
    logger.info("Feature request %s created by %s", resource.id, principal.id)
    return Outcome.allow(project(principal, resource, upvote_count=0))


async def upvote(db: AsyncSession, principal: Principal | None, request_id: str) -> Outcome:
    store = FeatureStore(db)
    resource = await store.find_resource(request_id)
    decision = decide(principal, Operation.UPVOTE, resource)
    if not decision.ok:
        return decision

    if await store.find_upvote(principal.id, request_id) is None:
        try:
            await store.create_upvote(principal.id, request_id)
        except UpvoteExists:
            # Lost a race with a concurrent upvote. If the row is ours the
            # caller's intent already holds.
            if await store.find_upvote(principal.id, request_id) is None:
                return Outcome.deny(Denial.CONFLICT, "Upvote could not be recorded")
            logger.debug("Concurrent upvote on %s by %s already applied", request_id, principal.id)
        except IntegrityError:
            # Request deleted between the lookup and the insert
            logger.info("Upvote on %s dropped: request no longer exists", request_id)
            return Outcome.deny(Denial.NOT_FOUND, "Feature request not found")

    return Outcome.allow(await _view(store, principal, resource))


async def remove_upvote(
    db: AsyncSession, principal: Principal | None, request_id: str
) -> Outcome:
    store = FeatureStore(db)
    resource = await store.find_resource(request_id)
    decision = decide(principal, Operation.REMOVE_UPVOTE, resource)
    if not decision.ok:
        return decision

    await store.delete_upvote(principal.id, request_id)
    return Outcome.allow(await _view(store, principal, resource))


async def delete_request(
    db: AsyncSession, principal: Principal | None, request_id: str
) -> Outcome:
    store = FeatureStore(db)
    resource = await store.find_resource(request_id)
    decision = decide(principal, Operation.DELETE, resource)
    if not decision.ok:
        return decision

    await store.delete_resource_and_upvotes(request_id)
    logger.info("Feature request %s deleted by %s", request_id, principal.id)
    return Outcome.allow()


async def change_status(
    db: AsyncSession, principal: Principal | None, request_id: str, new_status: str
) -> Outcome:
    store = FeatureStore(db)
    resource = await store.find_resource(request_id)
    decision = decide(principal, Operation.CHANGE_STATUS, resource, new_status=new_status)
    if not decision.ok:
        return decision

    resource = await store.update_status(request_id, new_status)
    logger.info("Feature request %s set to %s by %s", request_id, new_status, principal.id)
    return Outcome.allow(await _view(store, principal, resource))
