"""Repository for studio key/value settings."""
from typing import Optional

from database.models import StudioSetting
from database.repositories.base import BaseRepository


class StudioSettingRepository(BaseRepository[StudioSetting]):
    """Repository for StudioSetting rows."""

    model_class = StudioSetting
    order_by = (StudioSetting.key,)

    async def get_value(self, key: str) -> Optional[str]:
        setting = await self.get_by_id(key)
        return setting.value if setting else None

    async def set_value(self, key: str, value: str) -> StudioSetting:
        setting = await self.get_by_id(key)
        if setting is None:
            setting = StudioSetting(key=key, value=value)
            self.session.add(setting)
        else:
            setting.value = value
        await self.session.flush()
        return setting
