"""Account profile read/update for the authenticated user."""

from typing import Any, Mapping

from app.logging_config import logger
from app.models.user import User
from app.timeouts import with_timeout

PROFILE_FIELDS = ("display_name",)


class UserService:
    def __init__(self, users, timeout: float = 5.0):
        self.users = users
        self.timeout = timeout

    async def get_profile(self, user_id: int) -> User:
        return await with_timeout("get profile", self.users.get_by_id(user_id), self.timeout)

    async def update_profile(self, user_id: int, fields: Mapping[str, Any]) -> User:
        """Apply a partial profile update and return the stored account.

        Raises:
            NotFoundError: If the account no longer exists
        """
        return await with_timeout("update profile", self._update_profile(user_id, fields), self.timeout)

    async def _update_profile(self, user_id: int, fields: Mapping[str, Any]) -> User:
        values = {key: value for key, value in fields.items() if key in PROFILE_FIELDS}
        if values:
            await self.users.update_profile(user_id, values)
            logger.info("Profile updated", user_id=user_id, fields=sorted(values))
        return await self.users.get_by_id(user_id)
