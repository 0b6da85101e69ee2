from typing import List, Optional

from sqlalchemy.orm import joinedload

from ..config import settings
from ..models.app import AppDB
from ..schemas.page import Page, PageRequest
from .base import SoftDeleteRepository

_NEWEST_FIRST = (AppDB.create_time.desc(), AppDB.id.desc())

class AppRepository(SoftDeleteRepository[AppDB]):
    model = AppDB

    async def get_by_deploy_key(self, deploy_key: str) -> Optional[AppDB]:
        return await self._first(AppDB.deploy_key == deploy_key)

    async def exists_by_deploy_key(self, deploy_key: str) -> bool:
        return await self._exists(AppDB.deploy_key == deploy_key)

    async def get_with_owner(self, app_id: int) -> Optional[AppDB]:
        """App with ``user`` loaded; ``user`` is None when the owner is deleted."""
        query = self._select(AppDB.id == app_id).options(joinedload(AppDB.user))
        return await self.db.scalar(query)

    async def find_by_user_id(self, user_id: int, page: PageRequest) -> Page[AppDB]:
        return await self._page(AppDB.user_id == user_id, order_by=_NEWEST_FIRST, page=page)

    async def count_by_user_id(self, user_id: int) -> int:
        return await self._count(AppDB.user_id == user_id)

    async def find_featured(self, min_priority: Optional[int], page: PageRequest) -> Page[AppDB]:
        """
        Apps with priority >= ``min_priority``, highest priority first, then
        newest. None uses the configured featured threshold.
        """
        if min_priority is None:
            min_priority = settings.FEATURED_MIN_PRIORITY
        return await self._page(
            AppDB.priority >= min_priority,
            order_by=(AppDB.priority.desc(), AppDB.create_time.desc(), AppDB.id.desc()),
            page=page,
        )

    async def find_by_name_containing(self, app_name: str, page: PageRequest) -> Page[AppDB]:
        return await self._page(
            AppDB.app_name.contains(app_name, autoescape=True),
            order_by=_NEWEST_FIRST,
            page=page,
        )

    async def find_by_code_gen_type(self, code_gen_type: str, page: PageRequest) -> Page[AppDB]:
        return await self._page(AppDB.code_gen_type == code_gen_type, order_by=_NEWEST_FIRST, page=page)

    async def find_deployed(self, page: PageRequest) -> Page[AppDB]:
        return await self._page(
            AppDB.deployed_time.is_not(None),
            order_by=(AppDB.deployed_time.desc(), AppDB.id.desc()),
            page=page,
        )

    async def find_latest_by_user_id(self, user_id: int, limit: int) -> List[AppDB]:
        return await self._list(AppDB.user_id == user_id, order_by=_NEWEST_FIRST, limit=limit)
