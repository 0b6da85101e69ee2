"""
Field-level constraints checked before any row is written.

Each table has a pydantic model mirroring its columns; ``validate_entity``
reads the ORM object through it and turns the first violation into a
ParameterValidationError.
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from ..exceptions import ParameterValidationError
from .enums import CodeGenType, MessageType, UserRole

def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value

def _bounded(max_length: int):
    return Annotated[Optional[str], Field(max_length=max_length)]

def _required(max_length: Optional[int] = None):
    return Annotated[str, Field(max_length=max_length), AfterValidator(_not_blank)]

class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    create_time: datetime
    update_time: datetime
    is_delete: int = Field(ge=0, le=1)

class UserRecord(_Record):
    user_account: _required(256)
    user_password: _required(512)
    user_name: _bounded(256)
    user_avatar: _bounded(1024)
    user_profile: _bounded(512)
    user_role: UserRole
    edit_time: datetime

class AppRecord(_Record):
    app_name: _bounded(256)
    cover: _bounded(512)
    init_prompt: Optional[str] = None
    code_gen_type: Optional[CodeGenType] = None
    deploy_key: _bounded(64)
    deployed_time: Optional[datetime] = None
    priority: int
    user_id: int
    edit_time: datetime

class ChatHistoryRecord(_Record):
    message: _required()
    message_type: MessageType
    app_id: int
    user_id: int

RECORDS = {
    "user": UserRecord,
    "app": AppRecord,
    "chat_history": ChatHistoryRecord,
}

def validate_entity(entity):
    """Raise ParameterValidationError if ``entity`` breaks a column constraint."""
    record = RECORDS[entity.__tablename__]
    try:
        record.model_validate(entity)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ParameterValidationError(f"{field}: {error['msg']}") from e
    return entity
