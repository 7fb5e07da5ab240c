"""Default catalog seeded on a cold start."""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from database.repositories import MasterRepository, ServiceRepository

logger = logging.getLogger(__name__)

WORKING_WEEK = {
    day: [["09:00", "20:00"]]
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
}

DEFAULT_MASTERS = [
    {"id": "master-1", "name": "Вікторія", "color": "#8b5cf6", "work_schedule": WORKING_WEEK},
    {"id": "master-2", "name": "Світлана", "color": "#ec4899", "work_schedule": WORKING_WEEK},
    {"id": "master-3", "name": "Юля", "color": "#14b8a6", "work_schedule": WORKING_WEEK},
]

DEFAULT_SERVICES = [
    {"id": "svc-1", "name": "Манікюр класичний", "category": "manicure", "duration_minutes": 60, "price": 500, "color": "#8b5cf6"},
    {"id": "svc-2", "name": "Манікюр з покриттям гель-лак", "category": "manicure", "duration_minutes": 90, "price": 750, "color": "#a78bfa"},
    {"id": "svc-3", "name": "Дизайн", "category": "design", "duration_minutes": 30, "price": 200, "color": "#f472b6"},
    {"id": "svc-4", "name": "Зняття покриття", "category": "manicure", "duration_minutes": 15, "price": 100, "color": "#94a3b8"},
    {"id": "svc-5", "name": "Педикюр", "category": "pedicure", "duration_minutes": 90, "price": 800, "color": "#14b8a6"},
    {"id": "svc-6", "name": "Нарощування нігтів", "category": "extension", "duration_minutes": 150, "price": 1200, "color": "#f59e0b"},
]


async def seed_defaults(session: AsyncSession) -> dict[str, int]:
    """Seed masters and services when their tables are empty."""
    mrepo = MasterRepository(session)
    srepo = ServiceRepository(session)
    created = {"masters": 0, "services": 0}

    if await mrepo.count() == 0:
        for position, data in enumerate(DEFAULT_MASTERS, start=1):
            await mrepo.create(sort_order=position, **data)
        created["masters"] = len(DEFAULT_MASTERS)

    if await srepo.count() == 0:
        for position, data in enumerate(DEFAULT_SERVICES, start=1):
            await srepo.create(sort_order=position, **data)
        created["services"] = len(DEFAULT_SERVICES)

    if any(created.values()):
        logger.info(f"Seeded default catalog: {created}")
    return created
