from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import joinedload

from ..models.chat_history import ChatHistoryDB
from ..schemas.page import Page, PageRequest
from .base import SoftDeleteRepository

_NEWEST_FIRST = (ChatHistoryDB.create_time.desc(), ChatHistoryDB.id.desc())
_OLDEST_FIRST = (ChatHistoryDB.create_time.asc(), ChatHistoryDB.id.asc())

class ChatHistoryRepository(SoftDeleteRepository[ChatHistoryDB]):
    model = ChatHistoryDB

    async def get_with_relations(self, chat_id: int) -> Optional[ChatHistoryDB]:
        """Message with ``app`` and ``user`` loaded; either is None once deleted."""
        query = self._select(ChatHistoryDB.id == chat_id).options(
            joinedload(ChatHistoryDB.app),
            joinedload(ChatHistoryDB.user),
        )
        return await self.db.scalar(query)

    async def find_by_app_id(self, app_id: int, page: PageRequest) -> Page[ChatHistoryDB]:
        return await self._page(ChatHistoryDB.app_id == app_id, order_by=_NEWEST_FIRST, page=page)

    async def find_by_app_and_user(self, app_id: int, user_id: int, page: PageRequest) -> Page[ChatHistoryDB]:
        return await self._page(
            ChatHistoryDB.app_id == app_id,
            ChatHistoryDB.user_id == user_id,
            order_by=_NEWEST_FIRST,
            page=page,
        )

    async def find_by_user_id(self, user_id: int, page: PageRequest) -> Page[ChatHistoryDB]:
        return await self._page(ChatHistoryDB.user_id == user_id, order_by=_NEWEST_FIRST, page=page)

    async def count_by_app_id(self, app_id: int) -> int:
        return await self._count(ChatHistoryDB.app_id == app_id)

    async def count_by_app_id_and_type(self, app_id: int, message_type: str) -> int:
        return await self._count(ChatHistoryDB.app_id == app_id, ChatHistoryDB.message_type == message_type)

    async def find_latest_by_app_id(self, app_id: int, limit: int) -> List[ChatHistoryDB]:
        return await self._list(ChatHistoryDB.app_id == app_id, order_by=_NEWEST_FIRST, limit=limit)

    async def find_by_app_id_after(self, app_id: int, after_time: datetime, limit: int) -> List[ChatHistoryDB]:
        """Incremental sync: rows created strictly after ``after_time``, oldest first."""
        return await self._list(
            ChatHistoryDB.app_id == app_id,
            ChatHistoryDB.create_time > after_time,
            order_by=_OLDEST_FIRST,
            limit=limit,
        )

    async def soft_delete_by_app_id(self, app_id: int) -> int:
        return await self._soft_delete_where(ChatHistoryDB.app_id == app_id)

    async def soft_delete_before(self, before_time: datetime) -> int:
        """Retention cleanup: flag rows created before ``before_time``."""
        return await self._soft_delete_where(ChatHistoryDB.create_time < before_time)
