"""
Generic async repository shared by every table.

Writes go through ``_transaction`` so each one is committed on success and
rolled back (and logged) on failure; reads log and re-raise.
"""

from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from estate_api.database import Base
from typing import TypeVar, Generic, Optional, List, Dict, Any, Type, AsyncIterator
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    CRUD by primary key for a single model.

    Args:
        model: Mapped class the repository reads and writes
        db: Session owned by the current request
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        self.model = model
        self.db = db

    @property
    def name(self) -> str:
        return self.model.__name__

    @asynccontextmanager
    async def _transaction(self, action: str) -> AsyncIterator[None]:
        try:
            yield
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to {action} {self.name}: {e}")
            raise

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_in)
        async with self._transaction("create"):
            self.db.add(db_obj)
        await self.db.refresh(db_obj)
        logger.debug(f"Created {self.name} {db_obj.id}")
        return db_obj

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == id))
        except Exception as e:
            logger.error(f"Failed to load {self.name} {id}: {e}")
            raise
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: List[uuid.UUID]) -> Dict[uuid.UUID, ModelType]:
        """Load several rows in one query, keyed by ID. Unknown IDs are absent from the result."""
        if not ids:
            return {}
        try:
            result = await self.db.execute(select(self.model).where(self.model.id.in_(ids)))
        except Exception as e:
            logger.error(f"Failed to load {len(ids)} {self.name} rows: {e}")
            raise
        return {obj.id: obj for obj in result.scalars().all()}

    async def update(self, id: uuid.UUID, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """
        Apply the non-None values of ``obj_in`` to one row.

        Returns:
            The refreshed row, or None when no row has that ID
        """
        values = {k: v for k, v in obj_in.items() if v is not None}
        if not values:
            return await self.get_by_id(id)

        async with self._transaction("update"):
            result = await self.db.execute(
                update(self.model)
                .where(self.model.id == id)
                .values(**values)
                .execution_options(synchronize_session="fetch")
            )
        if result.rowcount == 0:
            return None

        obj = await self.get_by_id(id)
        if obj is not None:
            await self.db.refresh(obj)
            logger.debug(f"Updated {self.name} {id}: {sorted(values)}")
        return obj

    async def delete(self, id: uuid.UUID) -> bool:
        """Hard delete. Returns False when nothing matched."""
        async with self._transaction("delete"):
            result = await self.db.execute(delete(self.model).where(self.model.id == id))
        logger.debug(f"Delete {self.name} {id}: {result.rowcount} row(s)")
        return result.rowcount > 0
