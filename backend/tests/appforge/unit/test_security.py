from appforge.core.security import (
    get_legacy_password_hash,
    get_password_hash,
    needs_rehash,
    verify_password,
)
from appforge.core.session import SessionContext, USER_LOGIN_STATE

def test_password_hash_is_salted_per_call():
    first = get_password_hash("password123")
    second = get_password_hash("password123")

    assert first != second
    assert first.startswith("$argon2")
    assert verify_password("password123", first)
    assert verify_password("password123", second)
    assert not verify_password("password124", first)

def test_legacy_hash_matches_fixed_salt_md5():
    # md5("password123" + "yupi")
    legacy = get_legacy_password_hash("password123")

    assert len(legacy) == 32
    assert legacy == get_legacy_password_hash("password123", salt="yupi")
    assert legacy != get_legacy_password_hash("password123", salt="other")

def test_legacy_hash_still_verifies():
    legacy = get_legacy_password_hash("password123")

    assert verify_password("password123", legacy)
    assert not verify_password("password12", legacy)

def test_only_legacy_hashes_need_rehash():
    assert needs_rehash(get_legacy_password_hash("password123"))
    assert not needs_rehash(get_password_hash("password123"))

def test_missing_hash_never_verifies():
    assert verify_password("password123", None) is False
    assert verify_password("password123", "") is False

def test_unrecognized_hash_never_verifies():
    assert verify_password("password123", "not-a-real-hash") is False
    assert verify_password("password123", "$2b$12$truncated") is False

def test_session_context_binds_and_clears():
    store = {}
    session = SessionContext(store)

    assert not session.is_authenticated
    session.bind(12)
    assert store == {USER_LOGIN_STATE: 12}
    assert session.user_id == 12

    session.clear()
    assert store == {}
    # clearing twice is harmless at this level
    session.clear()
    assert session.user_id is None
