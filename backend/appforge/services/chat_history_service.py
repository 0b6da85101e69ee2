import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ..config import settings
from ..exceptions import ConstraintViolationError, OperationFailureError, ParameterValidationError
from ..models.chat_history import ChatHistoryDB, new_chat_history
from ..models.enums import MessageType
from ..repositories.app_repository import AppRepository
from ..repositories.chat_history_repository import ChatHistoryRepository
from ..schemas.chat_history import ChatHistoryQueryRequest
from ..specification import SortSpec, chat_history_query_clauses

logger = logging.getLogger(__name__)

MAX_HISTORY_PAGE_SIZE = 50

class ChatHistoryService:
    def __init__(self, chat_repo: ChatHistoryRepository, app_repo: AppRepository):
        self.chat_repo = chat_repo
        self.app_repo = app_repo

    async def add_message(self, app_id: int, message: str, message_type: str, user_id: int) -> ChatHistoryDB:
        if MessageType.from_value(message_type) is None:
            raise ParameterValidationError(f"Unsupported message type: {message_type}")
        if await self.app_repo.get_by_id(app_id) is None:
            raise ParameterValidationError("App does not exist")

        chat = new_chat_history(app_id=app_id, user_id=user_id, message=message, message_type=message_type)
        try:
            return await self.chat_repo.save(chat)
        except ConstraintViolationError as e:
            logger.error("Saving chat message failed", extra={"app_id": app_id, "user_id": user_id}, exc_info=e)
            raise OperationFailureError("Failed to save chat message") from e

    async def list_app_history(
        self,
        app_id: int,
        page_size: int = 10,
        last_create_time: Optional[datetime] = None,
    ) -> List[ChatHistoryDB]:
        """
        Newest messages of an app, walking backwards: pass the create_time of
        the last row received to get the next batch.
        """
        if app_id is None or app_id <= 0:
            raise ParameterValidationError("Invalid app id")
        if page_size < 1 or page_size > MAX_HISTORY_PAGE_SIZE:
            raise ParameterValidationError(f"Page size must be between 1 and {MAX_HISTORY_PAGE_SIZE}")

        request = ChatHistoryQueryRequest(app_id=app_id, last_create_time=last_create_time, page_size=page_size)
        return await self.chat_repo.find_all(
            chat_history_query_clauses(request),
            sort=SortSpec("create_time", ascending=False),
            limit=page_size,
        )

    async def delete_by_app(self, app_id: int) -> int:
        count = await self.chat_repo.soft_delete_by_app_id(app_id)
        logger.info("Chat history deleted for app", extra={"app_id": app_id, "count": count})
        return count

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Soft-delete messages older than the retention window."""
        cutoff = (now or datetime.now()) - timedelta(days=settings.CHAT_HISTORY_RETENTION_DAYS)
        count = await self.chat_repo.soft_delete_before(cutoff)
        logger.info("Expired chat history purged", extra={"count": count})
        return count
