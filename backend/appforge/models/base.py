from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, Integer, MetaData, SmallInteger
from sqlalchemy.orm import declarative_base

NOT_DELETED = 0
DELETED = 1

# SQLite only autoincrements INTEGER PRIMARY KEY
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")

convention = {
    "ix": "idx_%(column_0_label)s",
    "uq": "uk_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=convention))

class SoftDeleteMixin:
    """
    Audit timestamps and the integer delete flag shared by every table.

    Rows are never removed; repositories flip ``is_delete`` and filter it out
    of every read.
    """
    create_time = Column(DateTime, nullable=False)
    update_time = Column(DateTime, nullable=False)
    is_delete = Column(SmallInteger, nullable=False)

    @property
    def is_deleted(self) -> bool:
        return self.is_delete == DELETED

    def touch(self, now: datetime = None):
        self.update_time = now or datetime.now()
