from datetime import datetime
from typing import Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from .page import CamelModel, PageRequest

class UserQueryRequest(PageRequest):
    id: Optional[int] = None
    user_account: Optional[str] = None
    user_name: Optional[str] = None
    user_profile: Optional[str] = None
    user_role: Optional[str] = None

class UserVO(CamelModel):
    """Public view of a user (no password)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    user_account: str
    user_name: Optional[str] = None
    user_avatar: Optional[str] = None
    user_profile: Optional[str] = None
    user_role: str
    create_time: datetime

class LoginUserVO(UserVO):
    """View of the logged-in user"""
    update_time: datetime
    edit_time: datetime
