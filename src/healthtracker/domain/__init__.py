"""
HealthTrackerAI Domain Layer

Core entities and value objects, independent of infrastructure.
"""

from healthtracker.domain.enums import TicketPriority, TicketStatus
from healthtracker.domain.models import (
    BrowserEnvironment,
    BrowserInfo,
    DeviceRegistration,
    NotificationCapabilities,
    NotificationPermission,
    Ticket,
    TicketReply,
)

__all__ = [
    # Tickets
    "Ticket",
    "TicketReply",
    "TicketStatus",
    "TicketPriority",
    # Browser
    "BrowserEnvironment",
    "BrowserInfo",
    "NotificationCapabilities",
    "NotificationPermission",
    # Devices
    "DeviceRegistration",
]
