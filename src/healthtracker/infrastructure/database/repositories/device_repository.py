"""
Device Repository

Data access for push-enabled devices.
"""

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from healthtracker.domain.models.device import DeviceRegistration
from healthtracker.domain.models.ticket import utc_now
from healthtracker.infrastructure.database.models.device_model import DeviceModel
from healthtracker.infrastructure.database.repositories.base import BaseRepository


def _to_domain(model: DeviceModel) -> DeviceRegistration:
    return DeviceRegistration(
        id=model.id,
        user_id=model.user_id,
        token=model.token,
        user_agent=model.user_agent,
        device_type=model.device_type,
        notifications_enabled=model.notifications_enabled,
        last_login=model.last_login,
    )


class DeviceRepository(BaseRepository[DeviceModel]):
    """Device persistence returning domain objects."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(DeviceModel, session)

    async def list_for_users(self, user_ids: Sequence[str]) -> dict[str, list[DeviceRegistration]]:
        """Devices grouped by owner, newest login first."""
        grouped: dict[str, list[DeviceRegistration]] = {uid: [] for uid in user_ids}
        if not user_ids:
            return grouped

        query = (
            select(DeviceModel)
            .where(DeviceModel.user_id.in_(list(user_ids)))
            .order_by(DeviceModel.last_login.desc())
        )
        for model in await self.scalars(query):
            grouped.setdefault(model.user_id, []).append(_to_domain(model))
        return grouped

    async def get_for_user(self, user_id: str, device_id: str) -> Optional[DeviceRegistration]:
        model = await self.get_by_id(device_id)
        if model is None or model.user_id != user_id:
            return None
        return _to_domain(model)

    async def register(self, device: DeviceRegistration) -> DeviceRegistration:
        """
        Insert a device, or refresh the existing row for the same token.

        Returns:
            The stored registration
        """
        result = await self._session.execute(
            select(DeviceModel).where(
                DeviceModel.user_id == device.user_id,
                DeviceModel.token == device.token,
            )
        )
        model = result.scalar_one_or_none()

        if model is None:
            model = DeviceModel(
                id=device.id,
                user_id=device.user_id,
                token=device.token,
                user_agent=device.user_agent,
                device_type=device.device_type,
                notifications_enabled=device.notifications_enabled,
                last_login=device.last_login,
            )
            await self.create(model)
        else:
            model.user_agent = device.user_agent
            model.device_type = device.device_type
            model.last_login = utc_now()
            await self._session.flush()

        return _to_domain(model)

    async def set_notifications_enabled(
        self,
        user_id: str,
        device_id: str,
        enabled: bool,
    ) -> Optional[DeviceRegistration]:
        model = await self.get_by_id(device_id)
        if model is None or model.user_id != user_id:
            return None
        model.notifications_enabled = enabled
        await self._session.flush()
        return _to_domain(model)
