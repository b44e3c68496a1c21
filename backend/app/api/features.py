"""Feature request endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.deps import get_principal, raise_for
from backend.app.db import get_db
from backend.app.schemas.feature import (
    FeatureCreate,
    FeatureListResponse,
    FeatureQuery,
    FeatureResponse,
    StatusUpdate,
)
from backend.app.services import feature_service
from backend.app.services.access import Principal

router = APIRouter(prefix="/requests", tags=["requests"])

CurrentPrincipal = Annotated[Principal | None, Depends(get_principal)]


@router.get("", response_model=FeatureListResponse)
async def list_features(
    query: Annotated[FeatureQuery, Query()],
    principal: CurrentPrincipal,
    db: AsyncSession = Depends(get_db),
) -> dict:
    return raise_for(await feature_service.list_requests(db, principal, query))


@router.post("", response_model=FeatureResponse, status_code=201)
async def create_feature(
    data: FeatureCreate,
    principal: CurrentPrincipal,
    db: AsyncSession = Depends(get_db),
) -> dict:
    return raise_for(await feature_service.create_request(db, principal, data))


@router.get("/{request_id}", response_model=FeatureResponse)
async def get_feature(
    request_id: str,
    principal: CurrentPrincipal,
    db: AsyncSession = Depends(get_db),
) -> dict:
    return raise_for(await feature_service.get_request(db, principal, request_id))


@router.delete("/{request_id}", status_code=204)
async def delete_feature(
    request_id: str,
    principal: CurrentPrincipal,
    db: AsyncSession = Depends(get_db),
) -> None:
    raise_for(await feature_service.delete_request(db, principal, request_id))


@router.patch("/{request_id}/status", response_model=FeatureResponse)
async def change_feature_status(
    request_id: str,
    data: StatusUpdate,
    principal: CurrentPrincipal,
    db: AsyncSession = Depends(get_db),
) -> dict:
    return raise_for(
        await feature_service.change_status(db, principal, request_id, data.status)
    )


@router.post("/{request_id}/upvote", response_model=FeatureResponse)
async def upvote_feature(
    request_id: str,
    principal: CurrentPrincipal,
    db: AsyncSession = Depends(get_db),
) -> dict:
    return raise_for(await feature_service.upvote(db, principal, request_id))


@router.delete("/{request_id}/upvote", response_model=FeatureResponse)
async def remove_feature_upvote(
    request_id: str,
    principal: CurrentPrincipal,
    db: AsyncSession = Depends(get_db),
) -> dict:
    return raise_for(await feature_service.remove_upvote(db, principal, request_id))
