"""
Database ORM models package.
"""

from healthtracker.infrastructure.database.models.device_model import DeviceModel
from healthtracker.infrastructure.database.models.ticket_model import TicketModel, TicketReplyModel

__all__ = [
    "DeviceModel",
    "TicketModel",
    "TicketReplyModel",
]
