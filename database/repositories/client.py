"""Client repository for database operations."""
from typing import Optional, List
from datetime import datetime

from sqlalchemy import select

from database.models import Client
from database.repositories.base import BaseRepository


class ClientRepository(BaseRepository[Client]):
    """Repository for Client model operations."""

    model_class = Client
    order_by = (Client.name, Client.created_at)

    async def get_by_phone(self, phone: str) -> Optional[Client]:
        """Get client by normalized phone number."""
        result = await self.session.execute(
            select(Client).where(Client.phone == phone)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        id: str,
        name: str,
        phone: str,
        created_at: datetime,
        notes: Optional[str] = None,
        total_visits: int = 0,
        last_visit: Optional[datetime] = None,
        favorite_services: Optional[List[str]] = None,
    ) -> Client:
        """Create new client."""
        client = Client(
            id=id,
            name=name,
            phone=phone,
            notes=notes,
            created_at=created_at,
            total_visits=total_visits,
            last_visit=last_visit,
            favorite_services=list(favorite_services or []),
        )

        self.session.add(client)
        await self.session.flush()
        return client

    async def register_visit(self, client: Client, visited_at: datetime) -> Client:
        """Bump the visit counter for a repeat booking."""
        client.total_visits += 1
        client.last_visit = visited_at
        await self.session.flush()
        return client

    async def search_by_name(self, query: str, limit: int = 20) -> List[Client]:
        """Search clients by name."""
        result = await self.session.execute(
            select(Client)
            .where(Client.name.ilike(f"%{query}%"))
            .order_by(Client.name)
            .limit(limit)
        )
        return list(result.scalars().all())
