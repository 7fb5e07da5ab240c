"""Master repository for database operations."""
from typing import List

from sqlalchemy import select, func

from database.models import Master
from database.repositories.base import BaseRepository


class MasterRepository(BaseRepository[Master]):
    """Repository for Master model operations."""

    model_class = Master
    order_by = (Master.sort_order, Master.name)

    async def get_active(self) -> List[Master]:
        """Masters currently taking bookings, in display order."""
        result = await self.session.execute(
            select(Master).where(Master.is_active.is_(True)).order_by(*self.order_by)
        )
        return list(result.scalars().all())

    async def next_sort_order(self) -> int:
        result = await self.session.execute(select(func.max(Master.sort_order)))
        return (result.scalar() or 0) + 1

    async def create(
        self,
        id: str,
        name: str,
        color: str,
        is_active: bool = True,
        work_schedule: dict | None = None,
        sort_order: int | None = None,
    ) -> Master:
        """Create new master."""
        master = Master(
            id=id,
            name=name,
            color=color,
            is_active=is_active,
            work_schedule=work_schedule or {},
            sort_order=sort_order if sort_order is not None else await self.next_sort_order(),
        )

        self.session.add(master)
        await self.session.flush()
        return master
