from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Index, String, text

from .base import Base, ID_TYPE, NOT_DELETED, SoftDeleteMixin
from .enums import UserRole
from .validation import validate_entity

class UserDB(SoftDeleteMixin, Base):
    """
    ORM Model - table 'user'. The account is unique among rows that are not deleted.
    """
    __tablename__ = "user"

    id = Column(ID_TYPE, primary_key=True, autoincrement=True)
    user_account = Column(String(256), nullable=False)
    user_password = Column(String(512), nullable=False)
    user_name = Column(String(256))
    user_avatar = Column(String(1024))
    user_profile = Column(String(512))
    user_role = Column(String(256), nullable=False)
    edit_time = Column(DateTime, nullable=False)

    __table_args__ = (
        Index(
            "uk_user_account",
            "user_account",
            unique=True,
            postgresql_where=text("is_delete = 0"),
            sqlite_where=text("is_delete = 0"),
        ),
        Index("idx_user_name", "user_name"),
        Index("idx_user_role", "user_role"),
    )

def new_user(
    user_account: str,
    user_password: str,
    user_name: Optional[str] = None,
    user_avatar: Optional[str] = None,
    user_profile: Optional[str] = None,
    user_role: Optional[str] = None,
    now: Optional[datetime] = None,
) -> UserDB:
    """Build a validated, not-yet-persisted user with every default filled in."""
    now = now or datetime.now()
    user = UserDB(
        user_account=user_account,
        user_password=user_password,
        user_name=user_name,
        user_avatar=user_avatar,
        user_profile=user_profile,
        user_role=user_role if user_role and user_role.strip() else UserRole.USER.value,
        edit_time=now,
        create_time=now,
        update_time=now,
        is_delete=NOT_DELETED,
    )
    return validate_entity(user)
