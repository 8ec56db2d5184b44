import os
import tempfile
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Always run against the local store
os.environ["MONGODB_URI"] = ""
os.environ.setdefault("STORE_LOCAL_PATH", tempfile.mkdtemp(prefix="catalog-test-"))
os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")

from catalog.core.config import Settings  # noqa: E402
from catalog.db.seeds import default_seeds  # noqa: E402
from catalog.models.user import Role  # noqa: E402
from catalog.services.identity import CredentialIdentityProvider  # noqa: E402
from catalog.services.store import Store  # noqa: E402
from catalog.storage.local import LocalAdapter  # noqa: E402


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        MONGODB_URI="",
        STORE_LOCAL_PATH=str(tmp_path / "store"),
        ADMIN_EMAIL="admin@test.local",
        ADMIN_PASSWORD="admin-secret",
        DEFAULT_EARN_LINK="https://sponsor.example.com",
    )


@pytest.fixture
def adapter(settings) -> LocalAdapter:
    return LocalAdapter(settings.store_local_path, seeds=default_seeds(settings))


@pytest.fixture
def store(adapter, settings) -> Store:
    return Store(adapter, CredentialIdentityProvider(adapter), settings)


@pytest_asyncio.fixture
async def creator(store):
    return await store.register("Ana", "ana@example.com", "ana-password", Role.CREATOR)


@pytest_asyncio.fixture
async def admin(store):
    return await store.login_as_admin()


@pytest_asyncio.fixture
async def client(store) -> AsyncGenerator[AsyncClient, None]:
    from catalog.main import app
    app.state.store = store
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.state.store = None
