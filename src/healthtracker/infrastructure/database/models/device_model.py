"""
Device Database Model

Push-enabled browsers/devices per user.

SECURITY: FCM tokens address a specific device; never return them
from admin listings.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from healthtracker.infrastructure.database.connection import Base


class DeviceModel(Base):
    """
    Device table ORM model.

    Table: devices
    """

    __tablename__ = "devices"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    token: Mapped[str] = mapped_column(Text, nullable=False, doc="FCM registration token")
    user_agent: Mapped[str] = mapped_column(Text, default="", nullable=False)
    device_type: Mapped[str] = mapped_column(String(16), default="Desktop", nullable=False)
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("user_id", "token", name="uq_devices_user_token"),
    )

    def __repr__(self) -> str:
        return f"<DeviceModel(id={self.id}, user_id={self.user_id})>"
