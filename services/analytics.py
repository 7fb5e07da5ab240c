"""Client analytics: visits, spend, favorite services and recommendations."""
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from database.models import Service
from database.repositories import AppointmentRepository, ClientRepository, ServiceRepository
from database.store import EntityStore

logger = logging.getLogger(__name__)

FAVORITES_LIMIT = 3
RECOMMENDATIONS_LIMIT = 3


@dataclass
class FavoriteService:
    service_id: str
    service_name: str
    count: int


@dataclass
class ClientAnalytics:
    """Aggregated history of one client."""
    client_id: str
    total_visits: int
    total_spent: int
    average_check: float
    favorite_services: List[FavoriteService] = field(default_factory=list)
    last_visit_date: Optional[datetime] = None


class ClientAnalyticsService:
    """Read-only aggregation over the appointment history."""

    def __init__(self, store: EntityStore):
        """Initialize analytics service with the entity store."""
        self.store = store

    async def get_client_analytics(self, client_id: str) -> Optional[ClientAnalytics]:
        """Compute client analytics.

        Cancelled appointments are ignored. Spend uses the catalog prices as
        they are now, so a price change also changes past totals.

        Args:
            client_id: Client ID

        Returns:
            ClientAnalytics, or None if the client doesn't exist
        """
        async with self.store.session() as session:
            client = await ClientRepository(session).get_by_id(client_id)
            if client is None:
                return None
            appointments = await AppointmentRepository(session).get_by_client(
                client_id, include_cancelled=False
            )
            catalog = {s.id: s for s in await ServiceRepository(session).get_catalog()}

        total_spent = 0
        # Counter keeps first-seen order, so most_common() breaks ties by first encounter
        counts: Counter = Counter()
        for appointment in sorted(appointments, key=lambda a: (a.created_at, a.id)):
            for service_id in appointment.service_ids:
                counts[service_id] += 1
                service = catalog.get(service_id)
                if service is not None:
                    total_spent += service.price

        visits = len(appointments)
        favorites = [
            FavoriteService(
                service_id=service_id,
                service_name=catalog[service_id].name if service_id in catalog else "Unknown",
                count=count,
            )
            for service_id, count in counts.most_common(FAVORITES_LIMIT)
        ]

        logger.debug(f"Analytics for client: {visits} visit(s), spent {total_spent}", extra={"client_id": client_id})
        return ClientAnalytics(
            client_id=client_id,
            total_visits=visits,
            total_spent=total_spent,
            average_check=total_spent / visits if visits else 0,
            favorite_services=favorites,
            last_visit_date=client.last_visit,
        )

    async def get_recommended_services(self, client_id: str) -> List[Service]:
        """Client's favorite services, or the first catalog services when there are none."""
        analytics = await self.get_client_analytics(client_id)
        catalog = await self.store.list_services()

        by_id = {s.id: s for s in catalog}
        favorites = [
            by_id[favorite.service_id]
            for favorite in (analytics.favorite_services if analytics else [])
            if favorite.service_id in by_id
        ]
        return favorites or catalog[:RECOMMENDATIONS_LIMIT]
