"""
JSON snapshot of every studio collection.

Layout: one ordered list of records per collection plus the studio phone.
Datetimes are written as ISO-8601 strings and parsed back on import.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Type

from sqlalchemy import DateTime, delete, inspect, select

from database.base import Base
from database.models import (
    Appointment,
    CashTransaction,
    Client,
    Master,
    Notification,
    Service,
    STUDIO_PHONE,
)
from database.repositories import StudioSettingRepository
from database.store import EntityStore

logger = logging.getLogger(__name__)

# Import order respects the appointments -> masters foreign key
COLLECTIONS: Dict[str, Type[Base]] = {
    "masters": Master,
    "services": Service,
    "clients": Client,
    "appointments": Appointment,
    "cash_transactions": CashTransaction,
    "notifications": Notification,
}

ORDERING = {
    "masters": (Master.sort_order, Master.id),
    "services": (Service.sort_order, Service.id),
    "clients": (Client.created_at, Client.id),
    "appointments": (Appointment.start_time, Appointment.created_at, Appointment.id),
    "cash_transactions": (CashTransaction.created_at, CashTransaction.id),
    "notifications": (Notification.created_at.desc(), Notification.id),
}


def _to_record(entity: Base) -> Dict[str, Any]:
    record = {}
    for column in inspect(type(entity)).columns:
        value = getattr(entity, column.key)
        record[column.key] = value.isoformat() if isinstance(value, datetime) else value
    return record


def _from_record(model: Type[Base], record: Dict[str, Any]) -> Base:
    values = {}
    for column in inspect(model).columns:
        if column.key not in record:
            continue
        value = record[column.key]
        if isinstance(column.type, DateTime) and isinstance(value, str):
            value = datetime.fromisoformat(value)
        values[column.key] = value
    return model(**values)


async def export_snapshot(store: EntityStore) -> Dict[str, Any]:
    """Serialize all collections in one read transaction."""
    snapshot: Dict[str, Any] = {}
    async with store.session() as session:
        for name, model in COLLECTIONS.items():
            result = await session.execute(select(model).order_by(*ORDERING[name]))
            snapshot[name] = [_to_record(entity) for entity in result.scalars().all()]
        snapshot["studio_phone"] = (
            await StudioSettingRepository(session).get_value(STUDIO_PHONE) or store.default_studio_phone
        )
    return snapshot


async def import_snapshot(store: EntityStore, snapshot: Dict[str, Any]) -> Dict[str, int]:
    """Replace every collection with the snapshot contents, atomically."""
    counts: Dict[str, int] = {}
    async with store.session() as session:
        for model in reversed(list(COLLECTIONS.values())):
            await session.execute(delete(model))
        for name, model in COLLECTIONS.items():
            records: List[Dict[str, Any]] = snapshot.get(name, [])
            session.add_all([_from_record(model, record) for record in records])
            await session.flush()
            counts[name] = len(records)
        if snapshot.get("studio_phone"):
            await StudioSettingRepository(session).set_value(STUDIO_PHONE, snapshot["studio_phone"])
    logger.info(f"Snapshot imported: {counts}")
    return counts
