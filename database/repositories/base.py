"""
Base repository with common CRUD operations.

Provides a generic base class for all repositories to reduce code duplication.
"""
from typing import TypeVar, Generic, Optional, List, Type, Any
from abc import ABC

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from database.base import Base

# Type variable for model classes
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(ABC, Generic[ModelType]):
    """
    Abstract base repository with common CRUD operations.

    Provides:
    - get_by_id: Get single entity by ID
    - get_all: Get all entities in the repository's default order
    - patch: Apply a partial field update
    - delete: Delete entity by ID
    - count: Count all entities
    - exists: Check if entity exists by ID

    Usage:
        class MasterRepository(BaseRepository[Master]):
            model_class = Master
            order_by = (Master.sort_order,)
    """

    model_class: Type[ModelType]
    order_by: tuple = ()

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, entity_id: str) -> Optional[ModelType]:
        """
        Get entity by its primary key ID.

        Args:
            entity_id: Primary key ID

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model_class, entity_id)

    async def get_all(self, limit: Optional[int] = None) -> List[ModelType]:
        """
        Get all entities.

        Args:
            limit: Optional maximum number of results

        Returns:
            List of entities
        """
        query = select(self.model_class)
        if self.order_by:
            query = query.order_by(*self.order_by)
        if limit:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def patch(self, entity_id: str, fields: dict[str, Any]) -> Optional[ModelType]:
        """
        Apply a partial update.

        Args:
            entity_id: Primary key ID
            fields: Column values to overwrite

        Returns:
            Updated entity or None if not found
        """
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return None
        for name, value in fields.items():
            setattr(entity, name, value)
        await self.session.flush()
        return entity

    async def delete(self, entity_id: str) -> bool:
        """
        Delete entity by ID.

        Args:
            entity_id: Primary key ID

        Returns:
            True if deleted, False if not found
        """
        entity = await self.get_by_id(entity_id)
        if entity:
            await self.session.delete(entity)
            await self.session.flush()
            return True
        return False

    async def count(self) -> int:
        """
        Count all entities.

        Returns:
            Total count of entities
        """
        result = await self.session.execute(
            select(func.count()).select_from(self.model_class)
        )
        return result.scalar() or 0

    async def exists(self, entity_id: str) -> bool:
        """
        Check if entity exists by ID.

        Args:
            entity_id: Primary key ID

        Returns:
            True if exists, False otherwise
        """
        return await self.get_by_id(entity_id) is not None

    def add(self, entity: ModelType) -> None:
        """
        Add entity to session (for create operations).

        Args:
            entity: Entity to add
        """
        self.session.add(entity)

    async def flush(self) -> None:
        """Flush session changes to database."""
        await self.session.flush()
