"""
Repository pattern implementations package.
"""

from healthtracker.infrastructure.database.repositories.base import BaseRepository
from healthtracker.infrastructure.database.repositories.device_repository import DeviceRepository
from healthtracker.infrastructure.database.repositories.ticket_repository import TicketRepository

__all__ = [
    "BaseRepository",
    "DeviceRepository",
    "TicketRepository",
]
