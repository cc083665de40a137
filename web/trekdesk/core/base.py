from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

ModelType = TypeVar('ModelType')


class IRepository(ABC, Generic[ModelType]):
    """Repository interface shared by every aggregate"""

    @abstractmethod
    async def get(self, id: Any) -> Optional[ModelType]:
        pass

    @abstractmethod
    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        pass

    @abstractmethod
    async def update(self, *, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        pass

    @abstractmethod
    async def delete(self, *, id: Any) -> bool:
        pass


class BaseRepository(IRepository[ModelType], Generic[ModelType]):
    """Common CRUD on top of an AsyncSession.

    Writes only ``flush``; committing is left to the request session or the
    unit of work so several repositories can share one transaction.
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def get(self, id: Any) -> Optional[ModelType]:
        return await self.session.get(self.model, id)

    def _apply_filters(self, query, filters: Optional[Dict[str, Any]]):
        if filters:
            for key, value in filters.items():
                if value is not None and hasattr(self.model, key):
                    query = query.where(getattr(self.model, key) == value)
        return query

    async def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        await self.session.flush()
        return db_obj

    async def update(self, *, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        db_obj = await self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        await self.session.flush()
        return db_obj

    async def delete(self, *, id: Any) -> bool:
        db_obj = await self.get(id)
        if not db_obj:
            return False

        await self.session.delete(db_obj)
        await self.session.flush()
        return True

    async def count(self, *, filters: Optional[Dict[str, Any]] = None) -> int:
        query = self._apply_filters(select(func.count()).select_from(self.model), filters)
        result = await self.session.execute(query)
        return result.scalar() or 0


class BaseService:
    """Base service holding the request-scoped session"""

    def __init__(self, session: AsyncSession):
        self.session = session
