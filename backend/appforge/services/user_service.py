import logging
from typing import List, Optional

from ..config import settings
from ..core.security import get_password_hash, needs_rehash, verify_password
from ..core.session import SessionContext
from ..exceptions import (
    ConstraintViolationError,
    NotLoggedInError,
    OperationFailureError,
    ParameterValidationError,
)
from ..models.enums import UserRole
from ..models.user import UserDB, new_user
from ..repositories.user_repository import UserRepository
from ..schemas.page import Page
from ..schemas.user import LoginUserVO, UserQueryRequest, UserVO
from ..specification import resolve_sort, user_query_clauses

logger = logging.getLogger(__name__)

MIN_ACCOUNT_LENGTH = 4
MIN_PASSWORD_LENGTH = 8

# Same message whichever half of the credentials is wrong
LOGIN_FAILED_MESSAGE = "Account does not exist or password is incorrect"

def _has_blank(*values: Optional[str]) -> bool:
    return any(v is None or not v.strip() for v in values)

class UserService:
    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def register_user(self, user_account: str, user_password: str, check_password: str) -> int:
        """
        Create an account and return its id.

        Every rule is checked before touching storage. A duplicate that slips
        past the existence check (concurrent registration) is rejected by the
        unique index and reported as an OperationFailureError.
        """
        if _has_blank(user_account, user_password, check_password):
            raise ParameterValidationError("Parameters must not be empty")
        if len(user_account) < MIN_ACCOUNT_LENGTH:
            raise ParameterValidationError("Account is too short")
        if len(user_password) < MIN_PASSWORD_LENGTH or len(check_password) < MIN_PASSWORD_LENGTH:
            raise ParameterValidationError("Password is too short")
        if user_password != check_password:
            raise ParameterValidationError("The two passwords do not match")
        if await self.user_repo.exists_by_account(user_account):
            raise ParameterValidationError("Account already exists")

        user = new_user(
            user_account=user_account,
            user_password=get_password_hash(user_password),
            user_name=settings.DEFAULT_USER_NAME,
            user_role=UserRole.USER.value,
        )
        try:
            user = await self.user_repo.save(user)
        except ConstraintViolationError as e:
            logger.error("User registration failed", extra={"user_account": user_account}, exc_info=e)
            raise OperationFailureError("Registration failed, database error") from e

        logger.info("User registered", extra={"user_id": user.id, "user_account": user_account})
        return user.id

    async def login(self, user_account: str, user_password: str, session: SessionContext) -> LoginUserVO:
        if _has_blank(user_account, user_password):
            raise ParameterValidationError("Parameters must not be empty")
        if len(user_account) < MIN_ACCOUNT_LENGTH:
            raise ParameterValidationError("Account is too short")
        if len(user_password) < MIN_PASSWORD_LENGTH:
            raise ParameterValidationError("Password is too short")

        user = await self.user_repo.get_by_account(user_account)
        if not verify_password(user_password, user.user_password if user else None):
            logger.warning("Login failed", extra={"user_account": user_account})
            raise ParameterValidationError(LOGIN_FAILED_MESSAGE)

        if needs_rehash(user.user_password):
            user.user_password = get_password_hash(user_password)
            await self.user_repo.save(user)
            logger.info("Password verifier upgraded", extra={"user_id": user.id})

        session.bind(user.id)
        logger.info("User logged in", extra={"user_id": user.id, "user_account": user_account})
        return self.to_login_user_vo(user)

    async def get_login_user(self, session: SessionContext) -> UserDB:
        """Current user, re-read from storage so deleted accounts lose their session."""
        user_id = session.user_id
        if user_id is None:
            raise NotLoggedInError()
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotLoggedInError()
        return user

    def logout(self, session: SessionContext) -> bool:
        if not session.is_authenticated:
            raise OperationFailureError("User is not logged in")
        user_id = session.user_id
        session.clear()
        logger.info("User logged out", extra={"user_id": user_id})
        return True

    async def list_user_vo_page(self, request: UserQueryRequest) -> Page[UserVO]:
        clauses = user_query_clauses(request)
        sort = resolve_sort(UserDB, request.sort_field, request.sort_order)
        page = await self.user_repo.find_page(clauses, sort, request)
        return page.map(self.to_user_vo)

    def to_login_user_vo(self, user: Optional[UserDB]) -> Optional[LoginUserVO]:
        if user is None:
            return None
        return LoginUserVO.model_validate(user)

    def to_user_vo(self, user: Optional[UserDB]) -> Optional[UserVO]:
        if user is None:
            return None
        return UserVO.model_validate(user)

    def to_user_vo_list(self, users: Optional[List[UserDB]]) -> List[UserVO]:
        return [self.to_user_vo(u) for u in users or []]
