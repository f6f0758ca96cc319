"""
Base repository.

Generic CRUD operations for all repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from referral_engine.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic CRUD operations.

    Provides async database operations for any SQLAlchemy model.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession):
                super().__init__(User, session)
    """

    def __init__(
        self, model: type[ModelType], session: AsyncSession
    ) -> None:
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            session: Async database session
        """
        self.model = model
        self.session = session

    async def get_by_id(self, id: int) -> ModelType | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity or None if not found
        """
        return await self.session.get(self.model, id)

    async def get_by(
        self, **filters: Any
    ) -> ModelType | None:
        """
        Get single entity by filters.

        Args:
            **filters: Column filters

        Returns:
            First matching entity or None
        """
        stmt = select(self.model).filter_by(**filters)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **data: Any) -> ModelType:
        """
        Create new entity.

        Args:
            **data: Entity data

        Returns:
            Created entity
        """
        entity = self.model(**data)
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def bulk_create(
        self, items: list[dict[str, Any]]
    ) -> list[ModelType]:
        """
        Create multiple entities using RETURNING to avoid N+1 refresh.

        Args:
            items: List of entity data dicts

        Returns:
            List of created entities
        """
        if not items:
            return []

        result = await self.session.execute(
            insert(self.model).returning(self.model), items
        )
        return list(result.scalars().all())

    async def find_paginated(
        self,
        page: int = 1,
        per_page: int = 100,
        order_by: Any = None,
        **filters: Any
    ) -> tuple[list[ModelType], int]:
        """
        Find entities with pagination to avoid OOM.

        Args:
            page: Page number (1-indexed)
            per_page: Items per page
            order_by: Optional ORDER BY clauses (defaults to ID)
            **filters: Column filters

        Returns:
            Tuple of (items, total_count)
        """
        # Count total matching records
        count_stmt = select(func.count(self.model.id))
        if filters:
            count_stmt = count_stmt.filter_by(**filters)

        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        # Get paginated items
        offset = (page - 1) * per_page
        stmt = select(self.model).filter_by(**filters)
        if order_by is None:
            stmt = stmt.order_by(self.model.id)
        else:
            stmt = stmt.order_by(*order_by)
        stmt = stmt.offset(offset).limit(per_page)

        result = await self.session.execute(stmt)
        items = list(result.scalars().all())

        return items, total
