import pytest
import pytest_asyncio
from datetime import datetime, timedelta

from appforge.exceptions import ParameterValidationError

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)

def at(minutes):
    return BASE_TIME + timedelta(minutes=minutes)

@pytest_asyncio.fixture
async def owner_app(make_user, make_app):
    owner = await make_user()
    app = await make_app(owner.id, app_name="Todo")
    return owner, app

@pytest.mark.asyncio
async def test_add_message(chat_service, chat_repo, owner_app):
    owner, app = owner_app

    chat = await chat_service.add_message(app.id, "Build me a todo app", "user", owner.id)

    assert chat.id is not None
    assert await chat_repo.count_by_app_id_and_type(app.id, "user") == 1

@pytest.mark.asyncio
async def test_add_message_rejects_bad_input(chat_service, owner_app):
    owner, app = owner_app

    with pytest.raises(ParameterValidationError):
        await chat_service.add_message(app.id, "hi", "system", owner.id)
    with pytest.raises(ParameterValidationError):
        await chat_service.add_message(9999, "hi", "user", owner.id)
    with pytest.raises(ParameterValidationError):
        await chat_service.add_message(app.id, "   ", "ai", owner.id)

@pytest.mark.asyncio
async def test_add_message_to_deleted_app_is_rejected(chat_service, app_repo, owner_app):
    owner, app = owner_app
    await app_repo.soft_delete_by_id(app.id)

    with pytest.raises(ParameterValidationError):
        await chat_service.add_message(app.id, "hi", "user", owner.id)

@pytest.mark.asyncio
async def test_list_app_history_walks_backwards(chat_service, make_chat, owner_app):
    owner, app = owner_app
    rows = [await make_chat(app.id, owner.id, f"m{i}", now=at(i)) for i in range(5)]

    first = await chat_service.list_app_history(app.id, page_size=2)
    second = await chat_service.list_app_history(app.id, page_size=2, last_create_time=first[-1].create_time)
    last = await chat_service.list_app_history(app.id, page_size=2, last_create_time=second[-1].create_time)

    assert [c.message for c in first] == ["m4", "m3"]
    assert [c.message for c in second] == ["m2", "m1"]
    assert [c.message for c in last] == ["m0"]
    assert rows[0].id == last[0].id

@pytest.mark.asyncio
@pytest.mark.parametrize("app_id, page_size", [(0, 10), (-1, 10), (1, 0), (1, 51)])
async def test_list_app_history_validates_arguments(chat_service, app_id, page_size):
    with pytest.raises(ParameterValidationError):
        await chat_service.list_app_history(app_id, page_size=page_size)

@pytest.mark.asyncio
async def test_delete_by_app(chat_service, chat_repo, make_chat, owner_app):
    owner, app = owner_app
    await make_chat(app.id, owner.id, "q", now=at(0))
    await make_chat(app.id, owner.id, "a", "ai", now=at(1))

    assert await chat_service.delete_by_app(app.id) == 2
    assert await chat_service.list_app_history(app.id) == []
    assert await chat_repo.count_by_app_id(app.id) == 0

@pytest.mark.asyncio
async def test_purge_expired_keeps_retention_window(chat_service, chat_repo, make_chat, owner_app):
    owner, app = owner_app
    await make_chat(app.id, owner.id, "ancient", now=BASE_TIME)
    fresh = await make_chat(app.id, owner.id, "fresh", now=BASE_TIME + timedelta(days=35))

    purged = await chat_service.purge_expired(now=BASE_TIME + timedelta(days=40))

    assert purged == 1
    assert [c.id for c in await chat_repo.find_latest_by_app_id(app.id, limit=10)] == [fresh.id]
