import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from appforge.database import create_engine, create_schema, create_session_factory
from appforge.models.app import new_app
from appforge.models.chat_history import new_chat_history
from appforge.models.user import new_user
from appforge.repositories.app_repository import AppRepository
from appforge.repositories.chat_history_repository import ChatHistoryRepository
from appforge.repositories.user_repository import UserRepository
from appforge.services.chat_history_service import ChatHistoryService
from appforge.services.user_service import UserService

@pytest_asyncio.fixture
async def engine(tmp_path):
    # File database so every connection sees the same schema
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'appforge.db'}", echo=False)
    await create_schema(engine)
    yield engine
    await engine.dispose()

@pytest_asyncio.fixture
async def db_session(engine):
    factory = create_session_factory(engine)
    async with factory() as session:
        yield session

@pytest.fixture
def user_repo(db_session):
    return UserRepository(db_session)

@pytest.fixture
def app_repo(db_session):
    return AppRepository(db_session)

@pytest.fixture
def chat_repo(db_session):
    return ChatHistoryRepository(db_session)

@pytest.fixture
def user_service(user_repo):
    return UserService(user_repo)

@pytest.fixture
def chat_service(chat_repo, app_repo):
    return ChatHistoryService(chat_repo, app_repo)

@pytest.fixture
def make_user(user_repo):
    async def _make(user_account="owner01", **fields):
        fields.setdefault("user_password", "not-a-real-hash")
        return await user_repo.save(new_user(user_account=user_account, **fields))
    return _make

@pytest.fixture
def make_app(app_repo):
    async def _make(user_id, **fields):
        deploy_key = fields.pop("deploy_key", None)
        deployed_time = fields.pop("deployed_time", None)
        app = new_app(user_id=user_id, **fields)
        app.deploy_key = deploy_key
        app.deployed_time = deployed_time
        return await app_repo.save(app)
    return _make

@pytest.fixture
def make_chat(chat_repo):
    async def _make(app_id, user_id, message="hello", message_type="user", now=None):
        return await chat_repo.save(new_chat_history(app_id, user_id, message, message_type, now=now))
    return _make

@pytest_asyncio.fixture
async def client():
    from appforge.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
