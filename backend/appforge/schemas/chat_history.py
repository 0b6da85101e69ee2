from datetime import datetime
from typing import Optional

from .page import PageRequest

class ChatHistoryQueryRequest(PageRequest):
    id: Optional[int] = None
    message: Optional[str] = None
    message_type: Optional[str] = None
    app_id: Optional[int] = None
    user_id: Optional[int] = None
    # Cursor: only rows created strictly before this instant
    last_create_time: Optional[datetime] = None
