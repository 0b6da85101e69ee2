from typing import Any, MutableMapping, Optional

USER_LOGIN_STATE = "user_login"

class SessionContext:
    """
    Login state of one caller session.

    Wraps the opaque key-value store of the hosting request layer (for example
    Starlette's ``request.session``). A context is built when a request enters
    and dropped when it leaves; only the bound user id is stored.
    """

    def __init__(self, store: Optional[MutableMapping[str, Any]] = None):
        self._store = store if store is not None else {}

    @property
    def user_id(self) -> Optional[int]:
        return self._store.get(USER_LOGIN_STATE)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def bind(self, user_id: int) -> None:
        self._store[USER_LOGIN_STATE] = user_id

    def clear(self) -> None:
        self._store.pop(USER_LOGIN_STATE, None)
