import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from messagely.config import Settings
from messagely.db import Database
from messagely.auth import CredentialService
from messagely.crud import UserRepository, MessageRepository
from messagely.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'messagely.db'}",
        jwt_secret='test-secret',
        bcrypt_work_factor=4,
        log_level='WARNING',
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def credentials(database, settings):
    return CredentialService(database, settings)


@pytest.fixture
def users(database):
    return UserRepository(database)


@pytest.fixture
def messages(database):
    return MessageRepository(database)


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url='http://test') as ac:
        yield ac

