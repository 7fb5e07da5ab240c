"""Database repositories package."""
from database.repositories.master import MasterRepository
from database.repositories.client import ClientRepository
from database.repositories.service import ServiceRepository
from database.repositories.appointment import AppointmentRepository
from database.repositories.cash_transaction import CashTransactionRepository
from database.repositories.notification import NotificationRepository
from database.repositories.studio_setting import StudioSettingRepository

__all__ = [
    "MasterRepository",
    "ClientRepository",
    "ServiceRepository",
    "AppointmentRepository",
    "CashTransactionRepository",
    "NotificationRepository",
    "StudioSettingRepository",
]
