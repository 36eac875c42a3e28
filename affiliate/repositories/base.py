"""
Base repository.

Generic CRUD operations for all repositories.
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate.models.base import Base

# Generic type for model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with generic CRUD operations.

    Provides async database operations for any SQLAlchemy model.
    Repositories only flush; committing is the service's job.

    Type Parameters:
        ModelType: SQLAlchemy model class

    Example:
        class AffiliateClickRepository(BaseRepository[AffiliateClick]):
            def __init__(self, session: AsyncSession):
                super().__init__(AffiliateClick, session)
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

    async def get_by_id_for_update(self, id: int) -> ModelType | None:
        """
        Get entity by ID with a row lock (SELECT ... FOR UPDATE).

        The lock is held until the surrounding transaction ends.
        """
        stmt = (
            select(self.model)
            .where(self.model.id == id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

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
        stmt = select(self.model).filter_by(**filters).limit(1)
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

    async def update(
        self, id: int, for_update: bool = False, **data: Any
    ) -> ModelType | None:
        """
        Update entity by ID.

        Args:
            id: Entity ID
            for_update: Use SELECT FOR UPDATE to lock row
            **data: Updated data

        Returns:
            Updated entity or None if not found
        """
        if for_update:
            entity = await self.get_by_id_for_update(id)
        else:
            entity = await self.get_by_id(id)

        if not entity:
            return None

        for key, value in data.items():
            setattr(entity, key, value)

        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def count(self, **filters: Any) -> int:
        """
        Count entities matching filters.

        Args:
            **filters: Column filters

        Returns:
            Count of matching entities
        """
        stmt = select(func.count()).select_from(self.model)

        if filters:
            stmt = stmt.filter_by(**filters)

        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def exists(self, **filters: Any) -> bool:
        """
        Check if entity exists.

        Args:
            **filters: Column filters

        Returns:
            True if exists, False otherwise
        """
        count = await self.count(**filters)
        return count > 0

    async def paginate(
        self,
        stmt: Select,
        page: int,
        page_size: int,
    ) -> tuple[list[ModelType], int]:
        """
        Run a filtered select with pagination, newest (highest id) first.

        Args:
            stmt: Select over the model with filters applied
            page: Page number (1-indexed, already normalized)
            page_size: Items per page (already normalized)

        Returns:
            Tuple of (items, total_count)
        """
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        page_stmt = stmt.order_by(self.model.id.desc()).offset(offset).limit(page_size)

        result = await self.session.execute(page_stmt)
        items = list(result.scalars().all())

        return items, total
