"""Database models package."""
from database.models.master import Master
from database.models.client import Client
from database.models.service import Service
from database.models.appointment import Appointment, AppointmentStatus
from database.models.cash_transaction import CashTransaction, TransactionType
from database.models.notification import Notification, NotificationType
from database.models.studio_setting import StudioSetting, STUDIO_PHONE

__all__ = [
    "Master",
    "Client",
    "Service",
    "Appointment",
    "AppointmentStatus",
    "CashTransaction",
    "TransactionType",
    "Notification",
    "NotificationType",
    "StudioSetting",
    "STUDIO_PHONE",
]
