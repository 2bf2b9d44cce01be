"""
Menu item persistence. One parameterized statement per operation; writes commit
immediately. Driver failures surface as StorageError.
"""
from __future__ import annotations

from sqlalchemy import delete, select, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from menu_api.core.logging import get_logger
from menu_api.exceptions import StorageError
from menu_api.models.menu_item import MenuItem
from menu_api.schemas.menu import MenuItemCreate

logger = get_logger(__name__)


def _driver_message(exc: SQLAlchemyError) -> str:
    """Prefer the driver's own message over SQLAlchemy's wrapper text."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


class MenuRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _fail(self, exc: SQLAlchemyError, operation: str) -> StorageError:
        await self.session.rollback()
        message = _driver_message(exc)
        logger.error("storage_error", extra={"error": message, "operation": operation})
        return StorageError(message, {"operation": operation})

    async def create(self, data: MenuItemCreate) -> int:
        item = MenuItem(
            name=data.name,
            description=data.description,
            price=data.price,
            image_url=data.image_url,
        )
        self.session.add(item)
        try:
            await self.session.flush()
            item_id = item.id
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail(e, "create") from e
        return item_id

    async def list_all(self) -> list[MenuItem]:
        try:
            r = await self.session.execute(select(MenuItem).order_by(MenuItem.id))
        except SQLAlchemyError as e:
            raise await self._fail(e, "list") from e
        return list(r.scalars().all())

    async def get_by_id(self, item_id: int) -> MenuItem | None:
        try:
            r = await self.session.execute(select(MenuItem).where(MenuItem.id == item_id))
        except SQLAlchemyError as e:
            raise await self._fail(e, "get") from e
        return r.scalar_one_or_none()

    async def update(self, item_id: int, data: MenuItemCreate) -> int:
        """Overwrite every field. Returns the affected row count (0 for a missing id)."""
        stmt = (
            update(MenuItem)
            .where(MenuItem.id == item_id)
            .values(
                name=data.name,
                description=data.description,
                price=data.price,
                image_url=data.image_url,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            r = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail(e, "update") from e
        return r.rowcount

    async def delete(self, item_id: int) -> int:
        stmt = delete(MenuItem).where(MenuItem.id == item_id).execution_options(synchronize_session=False)
        try:
            r = await self.session.execute(stmt)
            await self.session.commit()
        except SQLAlchemyError as e:
            raise await self._fail(e, "delete") from e
        return r.rowcount
