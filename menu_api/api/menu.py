"""
/api/menu: create, list, fetch, overwrite and delete menu items.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.core.logging import get_logger
from menu_api.db import get_db
from menu_api.exceptions import ItemNotFoundError
from menu_api.repositories.menu_repo import MenuRepository
from menu_api.schemas.menu import (
    ErrorResponse,
    ItemCreatedResponse,
    MenuItemCreate,
    MenuItemSchema,
    MessageResponse,
)

logger = get_logger(__name__)

# Signed 64-bit range of the id column; anything wider is rejected with 400
ItemId = Annotated[int, Path(ge=-(2**63), le=2**63 - 1)]

router = APIRouter(
    prefix="/menu",
    tags=["menu"],
    responses={
        400: {"model": ErrorResponse, "description": "Malformed body or path parameter"},
        500: {"model": ErrorResponse, "description": "Storage error"},
    },
)


def get_repo(session: AsyncSession = Depends(get_db)) -> MenuRepository:
    return MenuRepository(session)


@router.post(
    "",
    response_model=ItemCreatedResponse,
    summary="Add a menu item",
    description="Inserts the item; the database assigns the id.",
)
async def create_item(
    body: MenuItemCreate,
    repo: MenuRepository = Depends(get_repo),
) -> ItemCreatedResponse:
    item_id = await repo.create(body)
    logger.info("item_added", extra={"item_id": item_id})
    return ItemCreatedResponse(message="Item added", id=item_id)


@router.get("", response_model=list[MenuItemSchema], summary="List all menu items")
async def list_items(repo: MenuRepository = Depends(get_repo)) -> list[MenuItemSchema]:
    items = await repo.list_all()
    return [MenuItemSchema.model_validate(it) for it in items]


@router.get(
    "/{item_id}",
    response_model=MenuItemSchema,
    summary="Get menu item by ID",
    responses={404: {"model": MessageResponse, "description": "Item not found"}},
)
async def get_item(item_id: ItemId, repo: MenuRepository = Depends(get_repo)) -> MenuItemSchema:
    item = await repo.get_by_id(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return MenuItemSchema.model_validate(item)


@router.put(
    "/{item_id}",
    response_model=MessageResponse,
    summary="Overwrite a menu item",
    description="Replaces all four fields. Succeeds even when no row has this id.",
)
async def update_item(
    item_id: ItemId,
    body: MenuItemCreate,
    repo: MenuRepository = Depends(get_repo),
) -> MessageResponse:
    rows = await repo.update(item_id, body)
    if not rows:
        logger.info("item_update_matched_nothing", extra={"item_id": item_id})
    return MessageResponse(message="Item updated")


@router.delete(
    "/{item_id}",
    response_model=MessageResponse,
    summary="Delete a menu item",
    description="Hard delete. Deleting a missing id is acknowledged the same way.",
)
async def delete_item(item_id: ItemId, repo: MenuRepository = Depends(get_repo)) -> MessageResponse:
    await repo.delete(item_id)
    logger.info("item_deleted", extra={"item_id": item_id})
    return MessageResponse(message="Item deleted")
