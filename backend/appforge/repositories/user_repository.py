from typing import List, Optional

from ..models.user import UserDB
from .base import SoftDeleteRepository

class UserRepository(SoftDeleteRepository[UserDB]):
    model = UserDB

    async def get_by_account(self, user_account: str) -> Optional[UserDB]:
        return await self._first(UserDB.user_account == user_account)

    async def exists_by_account(self, user_account: str) -> bool:
        return await self._exists(UserDB.user_account == user_account)

    async def count_by_role(self, user_role: str) -> int:
        return await self._count(UserDB.user_role == user_role)

    async def find_by_name_containing(self, user_name: str) -> List[UserDB]:
        return await self._list(
            UserDB.user_name.contains(user_name, autoescape=True),
            order_by=(UserDB.create_time.desc(), UserDB.id.desc()),
        )
