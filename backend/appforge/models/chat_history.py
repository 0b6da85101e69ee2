from datetime import datetime
from typing import Optional

from sqlalchemy import Column, ForeignKey, Index, String, Text, and_
from sqlalchemy.orm import relationship

from .base import Base, ID_TYPE, NOT_DELETED, SoftDeleteMixin
from .app import AppDB
from .user import UserDB
from .validation import validate_entity

class ChatHistoryDB(SoftDeleteMixin, Base):
    __tablename__ = "chat_history"

    id = Column(ID_TYPE, primary_key=True, autoincrement=True)
    message = Column(Text, nullable=False)
    message_type = Column(String(32), nullable=False)  # user / ai
    app_id = Column(ID_TYPE, ForeignKey("app.id", name="fk_chat_app"), nullable=False)
    user_id = Column(ID_TYPE, ForeignKey("user.id", name="fk_chat_user"), nullable=False)

    app = relationship(
        AppDB,
        primaryjoin=lambda: and_(ChatHistoryDB.app_id == AppDB.id, AppDB.is_delete == NOT_DELETED),
        viewonly=True,
        lazy="raise",
    )
    user = relationship(
        UserDB,
        primaryjoin=lambda: and_(ChatHistoryDB.user_id == UserDB.id, UserDB.is_delete == NOT_DELETED),
        viewonly=True,
        lazy="raise",
    )

    __table_args__ = (
        Index("idx_chat_app_id", "app_id"),
        Index("idx_chat_create_time", "create_time"),
        Index("idx_chat_app_time", "app_id", "create_time"),
        Index("idx_chat_user_id", "user_id"),
    )

def new_chat_history(
    app_id: int,
    user_id: int,
    message: str,
    message_type: str,
    now: Optional[datetime] = None,
) -> ChatHistoryDB:
    now = now or datetime.now()
    chat = ChatHistoryDB(
        app_id=app_id,
        user_id=user_id,
        message=message,
        message_type=message_type,
        create_time=now,
        update_time=now,
        is_delete=NOT_DELETED,
    )
    return validate_entity(chat)
