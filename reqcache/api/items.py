"""Demo resource behind the cache gates.

  GET    /items/{id}   CacheReadMiddleware runs first; this handler only
                       sees cache misses and answers from the item store.
  POST   /items        saves the item, then write_through() mirrors it
                       into the cache under /items/{id}.
  DELETE /items/{id}   CacheInvalidateMiddleware has already dropped the
                       cached entry; this handler deletes the item itself.

Cached and uncached reads share one response shape:
  {"fromCache": bool, "data": "<serialized item>"}
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from reqcache.api.dependencies import get_cache_context
from reqcache.core.errors import StoreError
from reqcache.models.cache_context import RequestCacheContext
from reqcache.services import items_service
from reqcache.services.cache import write_through

logger = logging.getLogger(__name__)

PREFIX = "/items"

router = APIRouter(prefix=PREFIX, tags=["items"])


class ItemIn(BaseModel):
    name: str
    description: str | None = None


class ItemOut(BaseModel):
    id: int
    name: str
    description: str | None = None


class ItemCreatedOut(BaseModel):
    item: ItemOut
    cached: bool


class ItemReadOut(BaseModel):
    fromCache: bool
    data: str


class ItemDeletedOut(BaseModel):
    deleted: int


def item_path(item_id: int) -> str:
    return f"{PREFIX}/{item_id}"


@router.get("/{item_id}", response_model=ItemReadOut)
async def get_item(item_id: int) -> ItemReadOut:
    item = items_service.get_item(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="item not found")
    return ItemReadOut(fromCache=False, data=items_service.serialize_item(item))


@router.post("", response_model=ItemCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_item(
    payload: ItemIn,
    context: Annotated[RequestCacheContext, Depends(get_cache_context)],
) -> ItemCreatedOut:
    try:
        item = items_service.create_item(payload.name, payload.description)
    except items_service.ItemValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    # The item exists either way; the response just says whether the
    # cache holds it too.
    try:
        cached = await write_through(
            context, item_path(item.id), items_service.serialize_item(item)
        )
    except StoreError as exc:
        logger.warning("item id=%d created but not cached: %s", item.id, exc)
        cached = False

    return ItemCreatedOut(
        item=ItemOut(id=item.id, name=item.name, description=item.description),
        cached=cached,
    )


@router.delete("/{item_id}", response_model=ItemDeletedOut)
async def delete_item(item_id: int) -> ItemDeletedOut:
    if not items_service.delete_item(item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="item not found")
    return ItemDeletedOut(deleted=item_id)
