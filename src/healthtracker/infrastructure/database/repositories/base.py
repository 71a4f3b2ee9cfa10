"""
Base Repository

Primary-key access shared by the ticket and device repositories.
Subclasses translate rows to domain objects; services never see ORM
models or SQLAlchemy queries.
"""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from healthtracker.infrastructure.database.connection import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Async repository over one mapped class, bound to a request's session.

    Writes are flushed, not committed; the session dependency commits
    when the request finishes.
    """

    def __init__(self, model: Type[ModelT], session: AsyncSession) -> None:
        self._model = model
        self._session = session

    async def get_by_id(self, id: str) -> Optional[ModelT]:
        return await self._session.get(self._model, id)

    async def create(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def update(self, entity: ModelT) -> ModelT:
        """Merge a detached instance (children cascade) and flush."""
        merged = await self._session.merge(entity)
        await self._session.flush()
        return merged

    async def scalars(self, query: Select[Any]) -> Sequence[ModelT]:
        result = await self._session.execute(query)
        return result.scalars().all()
