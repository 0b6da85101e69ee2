from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, and_, text
from sqlalchemy.orm import relationship

from .base import Base, ID_TYPE, NOT_DELETED, SoftDeleteMixin
from .user import UserDB
from .validation import validate_entity

class AppDB(SoftDeleteMixin, Base):
    """
    ORM Model - table 'app'. ``deploy_key`` stays NULL until the app is deployed.
    """
    __tablename__ = "app"

    id = Column(ID_TYPE, primary_key=True, autoincrement=True)
    app_name = Column(String(256))
    cover = Column(String(512))
    init_prompt = Column(Text)
    code_gen_type = Column(String(64))
    deploy_key = Column(String(64))
    deployed_time = Column(DateTime)
    priority = Column(Integer, nullable=False)
    user_id = Column(ID_TYPE, ForeignKey("user.id", name="fk_app_user"), nullable=False)
    edit_time = Column(DateTime, nullable=False)

    # Read-only; a deleted owner resolves to None
    user = relationship(
        UserDB,
        primaryjoin=lambda: and_(AppDB.user_id == UserDB.id, UserDB.is_delete == NOT_DELETED),
        viewonly=True,
        lazy="raise",
    )

    __table_args__ = (
        Index(
            "uk_deploy_key",
            "deploy_key",
            unique=True,
            postgresql_where=text("is_delete = 0"),
            sqlite_where=text("is_delete = 0"),
        ),
        Index("idx_app_name", "app_name"),
        Index("idx_app_user_id", "user_id"),
        Index("idx_app_priority", "priority"),
        Index("idx_app_code_gen_type", "code_gen_type"),
        Index("idx_app_create_time", "create_time"),
    )

def new_app(
    user_id: int,
    app_name: Optional[str] = None,
    init_prompt: Optional[str] = None,
    code_gen_type: Optional[str] = None,
    cover: Optional[str] = None,
    priority: Optional[int] = None,
    now: Optional[datetime] = None,
) -> AppDB:
    """Build a validated, undeployed app owned by ``user_id``."""
    now = now or datetime.now()
    app = AppDB(
        user_id=user_id,
        app_name=app_name,
        init_prompt=init_prompt,
        code_gen_type=code_gen_type,
        cover=cover,
        priority=0 if priority is None else priority,
        edit_time=now,
        create_time=now,
        update_time=now,
        is_delete=NOT_DELETED,
    )
    return validate_entity(app)
