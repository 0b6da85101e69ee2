import pytest
from datetime import datetime
from appforge.exceptions import ParameterValidationError
from appforge.models.app import new_app
from appforge.models.base import DELETED, NOT_DELETED
from appforge.models.chat_history import new_chat_history
from appforge.models.enums import CodeGenType, MessageType, UserRole
from appforge.models.user import new_user
from appforge.models.validation import validate_entity

NOW = datetime(2024, 1, 1, 12, 0, 0)

def test_new_user_populates_defaults():
    user = new_user("alice01", "hash", now=NOW)

    assert user.user_role == UserRole.USER.value
    assert user.is_delete == NOT_DELETED
    assert user.create_time == user.update_time == user.edit_time == NOW
    assert user.id is None

def test_new_user_blank_role_defaults_to_user():
    assert new_user("alice01", "hash", user_role="  ").user_role == "user"
    assert new_user("alice01", "hash", user_role="admin").user_role == "admin"

def test_new_app_defaults_priority_to_zero():
    app = new_app(user_id=1, app_name="Todo", now=NOW)

    assert app.priority == 0
    assert app.deploy_key is None
    assert app.deployed_time is None
    assert app.edit_time == NOW

def test_new_app_keeps_explicit_priority():
    assert new_app(user_id=1, priority=5).priority == 5

def test_touch_only_moves_update_time():
    user = new_user("alice01", "hash", now=NOW)

    user.touch(datetime(2024, 2, 1))

    assert user.update_time == datetime(2024, 2, 1)
    assert user.create_time == NOW
    assert user.edit_time == NOW

@pytest.mark.parametrize("kwargs, field", [
    ({"user_account": "   ", "user_password": "hash"}, "user_account"),
    ({"user_account": "a" * 257, "user_password": "hash"}, "user_account"),
    ({"user_account": "alice01", "user_password": ""}, "user_password"),
    ({"user_account": "alice01", "user_password": "hash", "user_avatar": "x" * 1025}, "user_avatar"),
    ({"user_account": "alice01", "user_password": "hash", "user_role": "root"}, "user_role"),
])
def test_user_constraints(kwargs, field):
    with pytest.raises(ParameterValidationError) as exc:
        new_user(**kwargs)
    assert exc.value.message.startswith(field)

def test_app_constraints():
    with pytest.raises(ParameterValidationError):
        new_app(user_id=1, app_name="n" * 257)
    with pytest.raises(ParameterValidationError):
        new_app(user_id=1, code_gen_type="react")
    with pytest.raises(ParameterValidationError):
        new_app(user_id=None)

    assert new_app(user_id=1, code_gen_type=CodeGenType.VUE_PROJECT.value).code_gen_type == "vue_project"

def test_chat_history_constraints():
    with pytest.raises(ParameterValidationError):
        new_chat_history(app_id=1, user_id=1, message="hi", message_type="system")
    with pytest.raises(ParameterValidationError):
        new_chat_history(app_id=1, user_id=1, message=" \n", message_type="ai")

    chat = new_chat_history(app_id=1, user_id=1, message="hi", message_type=MessageType.AI.value)
    assert chat.is_delete == NOT_DELETED

def test_validate_entity_checks_mutations():
    user = new_user("alice01", "hash")
    user.user_profile = "p" * 513

    with pytest.raises(ParameterValidationError):
        validate_entity(user)

def test_deleted_flag():
    user = new_user("alice01", "hash")
    assert not user.is_deleted
    user.is_delete = DELETED
    assert user.is_deleted

def test_enum_lookup():
    assert MessageType.from_value("ai") is MessageType.AI
    assert MessageType.from_value("robot") is None
    assert UserRole.from_value("") is None
    assert CodeGenType.values() == ["html", "multi_file", "vue_project"]
