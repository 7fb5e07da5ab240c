"""Service repository for database operations."""
from typing import Optional, List

from sqlalchemy import select, func

from database.models import Service
from database.repositories.base import BaseRepository


class ServiceRepository(BaseRepository[Service]):
    """Repository for Service model operations."""

    model_class = Service
    order_by = (Service.sort_order, Service.id)

    async def get_by_ids(self, service_ids: List[str]) -> List[Service]:
        """Get multiple services by IDs, in the order the ids were given. Unknown ids are skipped."""
        if not service_ids:
            return []

        result = await self.session.execute(
            select(Service).where(Service.id.in_(service_ids))
        )
        by_id = {s.id: s for s in result.scalars().all()}
        return [by_id[sid] for sid in service_ids if sid in by_id]

    async def get_catalog(self, limit: Optional[int] = None) -> List[Service]:
        """Services in catalog order."""
        return await self.get_all(limit=limit)

    async def next_sort_order(self) -> int:
        result = await self.session.execute(select(func.max(Service.sort_order)))
        return (result.scalar() or 0) + 1

    async def create(
        self,
        id: str,
        name: str,
        duration_minutes: int,
        price: int,
        category: Optional[str] = None,
        color: str = "#8b5cf6",
        sort_order: Optional[int] = None,
    ) -> Service:
        """Create new service."""
        service = Service(
            id=id,
            name=name,
            duration_minutes=duration_minutes,
            price=price,
            category=category,
            color=color,
            sort_order=sort_order if sort_order is not None else await self.next_sort_order(),
        )

        self.session.add(service)
        await self.session.flush()
        return service
