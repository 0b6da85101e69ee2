import hashlib
from typing import Optional

from passlib.context import CryptContext

from ..config import settings

# argon2 for new verifiers; hex_md5 only identifies rows written by the old
# fixed-salt scheme so they can still be verified and then upgraded
pwd_context = CryptContext(schemes=["argon2", "hex_md5"], deprecated=["hex_md5"])

# Verified against when the account is unknown so both failure paths do the same work
_DUMMY_HASH = pwd_context.hash("appforge-dummy-password")

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

def get_legacy_password_hash(password: str, salt: Optional[str] = None) -> str:
    """MD5 of password + fixed salt, as stored by the previous scheme."""
    salt = settings.LEGACY_PASSWORD_SALT if salt is None else salt
    return hashlib.md5((password + salt).encode("utf-8")).hexdigest()

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    scheme = pwd_context.identify(hashed_password) if hashed_password else None
    if scheme is None:
        pwd_context.verify(plain_password, _DUMMY_HASH)
        return False
    if scheme == "hex_md5":
        return pwd_context.verify(plain_password + settings.LEGACY_PASSWORD_SALT, hashed_password)
    return pwd_context.verify(plain_password, hashed_password)

def needs_rehash(hashed_password: str) -> bool:
    return pwd_context.needs_update(hashed_password)
