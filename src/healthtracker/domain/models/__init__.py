"""Domain models package."""

from healthtracker.domain.models.browser import (
    BrowserEnvironment,
    BrowserInfo,
    NotificationCapabilities,
    NotificationPermission,
)
from healthtracker.domain.models.device import DeviceRegistration
from healthtracker.domain.models.ticket import (
    CreateReplyData,
    CreateTicketData,
    Ticket,
    TicketAttachment,
    TicketFilter,
    TicketReply,
    TicketStats,
    UpdateTicketData,
)

__all__ = [
    "BrowserEnvironment",
    "BrowserInfo",
    "NotificationCapabilities",
    "NotificationPermission",
    "DeviceRegistration",
    "CreateReplyData",
    "CreateTicketData",
    "Ticket",
    "TicketAttachment",
    "TicketFilter",
    "TicketReply",
    "TicketStats",
    "UpdateTicketData",
]
