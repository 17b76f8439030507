from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from posledger.core.db import Database
from posledger.models.base import LedgerRecord, local_now

ModelT = TypeVar("ModelT", bound=LedgerRecord)


async def set_active(session: AsyncSession, model: Type[LedgerRecord], record_id: int, active: bool) -> bool:
    """Flips is_active on one row. Returns False when the row is missing or already in that state."""
    result = await session.execute(
        update(model)
        .where(model.id == record_id, model.is_active.is_(not active))
        .values(is_active=active, updated_at=local_now())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def patch_row(session: AsyncSession, model: Type[LedgerRecord], record_id: int, values: Dict[str, Any]) -> None:
    """Writes the given columns and refreshes updated_at."""
    await session.execute(
        update(model)
        .where(model.id == record_id)
        .values(**values, updated_at=local_now())
        .execution_options(synchronize_session=False)
    )


class BaseRepository(Generic[ModelT]):
    """
    Reads and soft deletes shared by every table.

    Every method takes an optional ``session``; passing one runs the call inside
    the caller's unit of work, otherwise the call gets a transaction of its own.
    """
    model: Type[ModelT]

    def __init__(self, db: Database):
        self.db = db

    def _active(self) -> Select:
        return select(self.model).where(self.model.is_active.is_(True))

    def _newest_first(self, stmt: Select) -> Select:
        return stmt.order_by(self.model.created_at.desc(), self.model.id.desc())

    async def get_all(self, session: Optional[AsyncSession] = None) -> List[ModelT]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._newest_first(self._active()))
            return list(result)

    async def get_by_id(self, record_id: int, session: Optional[AsyncSession] = None) -> Optional[ModelT]:
        async with self.db.in_transaction(session) as s:
            # populate_existing: bulk UPDATEs in the same session bypass the identity map
            stmt = self._active().where(self.model.id == record_id).execution_options(populate_existing=True)
            return await s.scalar(stmt)

    async def exists(self, record_id: int, session: Optional[AsyncSession] = None) -> bool:
        async with self.db.in_transaction(session) as s:
            found = await s.scalar(
                select(func.count(self.model.id)).where(self.model.id == record_id, self.model.is_active.is_(True))
            )
            return bool(found)

    async def count(self, session: Optional[AsyncSession] = None) -> int:
        async with self.db.in_transaction(session) as s:
            total = await s.scalar(select(func.count(self.model.id)).where(self.model.is_active.is_(True)))
            return total or 0

    async def create(self, data: BaseModel, session: Optional[AsyncSession] = None) -> ModelT:
        async with self.db.in_transaction(session) as s:
            record = self.model(**data.model_dump())
            s.add(record)
            await s.flush()
            return await self.get_by_id(record.id, session=s)

    async def update(
        self, record_id: int, data: BaseModel, session: Optional[AsyncSession] = None
    ) -> Optional[ModelT]:
        """Patches only the fields set on ``data``. None when the row is missing or deleted."""
        async with self.db.in_transaction(session) as s:
            existing = await self.get_by_id(record_id, session=s)
            if existing is None:
                return None

            values = data.model_dump(exclude_unset=True)
            if not values:
                return existing

            await patch_row(s, self.model, record_id, values)
            return await self.get_by_id(record_id, session=s)

    async def delete(self, record_id: int, session: Optional[AsyncSession] = None) -> bool:
        async with self.db.in_transaction(session) as s:
            return await set_active(s, self.model, record_id, False)

    async def restore(self, record_id: int, session: Optional[AsyncSession] = None) -> bool:
        async with self.db.in_transaction(session) as s:
            return await set_active(s, self.model, record_id, True)

    async def _search_by_name(self, text: str, session: Optional[AsyncSession] = None) -> List[ModelT]:
        async with self.db.in_transaction(session) as s:
            result = await s.scalars(self._active().where(self.model.name.ilike(f"%{text}%")).order_by(self.model.name))
            return list(result)
