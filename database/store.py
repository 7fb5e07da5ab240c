"""
Entity store: owner of every studio collection.

All other components read and write masters, services, clients,
appointments, cash transactions and notifications through a store
instance. Persistence (session factory), the clock and the id factory are
injected, so tests and scripts can build isolated stores.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.clock import Clock, IdFactory, SystemClock, generate_id
from core.config import settings
from core.dto import (
    CreateClientDTO,
    CreateMasterDTO,
    CreateServiceDTO,
    UpdateClientDTO,
    UpdateMasterDTO,
    UpdateServiceDTO,
)
from core.exceptions import DuplicateClientError
from core.locks import BucketLocks
from database.base import get_db
from database.models import Client, Master, Service, STUDIO_PHONE
from database.repositories import (
    AppointmentRepository,
    ClientRepository,
    MasterRepository,
    ServiceRepository,
    StudioSettingRepository,
)
from database.seed import seed_defaults

logger = logging.getLogger(__name__)

_transaction = asynccontextmanager(get_db)


class EntityStore:
    """Transactional access to the studio collections."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
        lock_timeout: Optional[float] = None,
        default_studio_phone: Optional[str] = None,
    ):
        self.session_maker = session_maker
        self.clock = clock or SystemClock(settings.timezone)
        self.id_factory = id_factory or generate_id
        self.locks = BucketLocks(lock_timeout or settings.booking_lock_timeout)
        self.default_studio_phone = default_studio_phone or settings.default_studio_phone

    def session(self) -> AsyncContextManager[AsyncSession]:
        """One transaction: commit on success, rollback on any exception."""
        return _transaction(self.session_maker)

    def new_id(self) -> str:
        return self.id_factory()

    def now(self):
        return self.clock.now()

    async def seed_defaults(self) -> dict[str, int]:
        async with self.session() as session:
            return await seed_defaults(session)

    # ========== Masters ==========

    async def add_master(self, data: CreateMasterDTO) -> Master:
        async with self.session() as session:
            master = await MasterRepository(session).create(id=self.new_id(), **data.model_dump())
        logger.info(f"Master created: {master.name}", extra={"master_id": master.id})
        return master

    async def update_master(self, master_id: str, data: UpdateMasterDTO) -> bool:
        async with self.session() as session:
            master = await MasterRepository(session).patch(master_id, data.model_dump(exclude_unset=True))
        return master is not None

    async def delete_master(self, master_id: str) -> bool:
        """Delete a master together with all of the master's appointments."""
        async with self.session() as session:
            masters = MasterRepository(session)
            if not await masters.exists(master_id):
                return False
            removed = await AppointmentRepository(session).delete_by_master(master_id)
            await masters.delete(master_id)
        logger.info(
            f"Master deleted with {removed} appointment(s)",
            extra={"master_id": master_id},
        )
        return True

    async def get_master(self, master_id: str) -> Optional[Master]:
        async with self.session() as session:
            return await MasterRepository(session).get_by_id(master_id)

    async def list_masters(self, active_only: bool = False) -> List[Master]:
        async with self.session() as session:
            repo = MasterRepository(session)
            return await (repo.get_active() if active_only else repo.get_all())

    # ========== Services ==========

    async def add_service(self, data: CreateServiceDTO) -> Service:
        async with self.session() as session:
            service = await ServiceRepository(session).create(id=self.new_id(), **data.model_dump())
        logger.info(f"Service created: {service.name}")
        return service

    async def update_service(self, service_id: str, data: UpdateServiceDTO) -> bool:
        async with self.session() as session:
            service = await ServiceRepository(session).patch(service_id, data.model_dump(exclude_unset=True))
        return service is not None

    async def delete_service(self, service_id: str) -> bool:
        """Delete a service. Appointments keep the id as a dangling reference."""
        async with self.session() as session:
            return await ServiceRepository(session).delete(service_id)

    async def get_service(self, service_id: str) -> Optional[Service]:
        async with self.session() as session:
            return await ServiceRepository(session).get_by_id(service_id)

    async def list_services(self) -> List[Service]:
        async with self.session() as session:
            return await ServiceRepository(session).get_catalog()

    # ========== Clients ==========

    async def add_client(self, data: CreateClientDTO) -> Client:
        async with self.session() as session:
            repo = ClientRepository(session)
            if await repo.get_by_phone(data.phone):
                raise DuplicateClientError(data.phone)
            client = await repo.create(
                id=self.new_id(),
                name=data.name,
                phone=data.phone,
                notes=data.notes,
                created_at=self.now(),
            )
        logger.info(f"Client created: {client.name}", extra={"client_id": client.id})
        return client

    async def update_client(self, client_id: str, data: UpdateClientDTO) -> bool:
        fields = data.model_dump(exclude_unset=True)
        async with self.session() as session:
            repo = ClientRepository(session)
            if "phone" in fields:
                other = await repo.get_by_phone(fields["phone"])
                if other is not None and other.id != client_id:
                    raise DuplicateClientError(fields["phone"])
            client = await repo.patch(client_id, fields)
        return client is not None

    async def delete_client(self, client_id: str) -> bool:
        """Delete a client. Appointments stay, keeping their name/phone snapshot."""
        async with self.session() as session:
            deleted = await ClientRepository(session).delete(client_id)
            if deleted:
                await AppointmentRepository(session).detach_client(client_id)
        return deleted

    async def get_client(self, client_id: str) -> Optional[Client]:
        async with self.session() as session:
            return await ClientRepository(session).get_by_id(client_id)

    async def get_client_by_phone(self, phone: str) -> Optional[Client]:
        async with self.session() as session:
            return await ClientRepository(session).get_by_phone(phone)

    async def list_clients(self, query: Optional[str] = None) -> List[Client]:
        async with self.session() as session:
            repo = ClientRepository(session)
            return await (repo.search_by_name(query) if query else repo.get_all())

    # ========== Studio settings ==========

    async def get_studio_phone(self) -> str:
        async with self.session() as session:
            value = await StudioSettingRepository(session).get_value(STUDIO_PHONE)
        return value or self.default_studio_phone

    async def set_studio_phone(self, phone: str) -> None:
        async with self.session() as session:
            await StudioSettingRepository(session).set_value(STUDIO_PHONE, phone)
