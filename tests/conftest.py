import pytest
from httpx import ASGITransport, AsyncClient

from todo_api.database import StorageHandle, get_storage
from todo_api.main import app
from todo_api.repositories.todo_repo import TodoRepository


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def storage(tmp_path):
    handle = StorageHandle(f"sqlite+aiosqlite:///{tmp_path / 'todos.db'}")
    await handle.ensure_schema()
    yield handle
    await handle.close()


@pytest.fixture
def repo(storage):
    return TodoRepository(storage)


@pytest.fixture
async def client(storage):
    # swap the lifespan-built handle for the per-test sqlite one
    app.dependency_overrides[get_storage] = lambda: storage
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
