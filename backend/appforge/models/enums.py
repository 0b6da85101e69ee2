from enum import Enum
from typing import Optional

class _ValueEnum(str, Enum):

    @classmethod
    def from_value(cls, value: Optional[str]):
        """Return the member for ``value`` or None when it is blank or unknown."""
        if not value:
            return None
        for member in cls:
            if member.value == value:
                return member
        return None

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]

class UserRole(_ValueEnum):
    USER = "user"
    ADMIN = "admin"

class CodeGenType(_ValueEnum):
    HTML = "html"
    MULTI_FILE = "multi_file"
    VUE_PROJECT = "vue_project"

class MessageType(_ValueEnum):
    USER = "user"
    AI = "ai"
