import pytest
from sqlalchemy import select, text

from todo_api.errors import ErrorKind, TodoError
from todo_api.repositories.todo_repo import TodoRepository, todos

pytestmark = pytest.mark.anyio


async def test_create_on_empty_table(repo):
    todo = await repo.create("Buy milk")
    assert todo.model_dump() == {"id": 1, "task": "Buy milk", "completed": False}


async def test_create_then_get_by_id(repo):
    created = await repo.create("Write report")
    fetched = await repo.get_by_id(created.id)
    assert fetched == created


async def test_get_all_returns_every_row(repo):
    a = await repo.create("A")
    b = await repo.create("B")
    rows = await repo.get_all()
    assert {t.task for t in rows} == {"A", "B"}
    assert a.id != b.id


async def test_get_by_id_missing_returns_none(repo):
    assert await repo.get_by_id(424242) is None


async def test_get_by_task_is_exact_match(repo):
    await repo.create("Walk the dog")
    assert (await repo.get_by_task("Walk the dog")).task == "Walk the dog"
    assert await repo.get_by_task("Walk the") is None
    assert await repo.get_by_task("walk the dog") is None


async def test_get_by_status(repo):
    open_todo = await repo.create("open")
    done = await repo.create("done")
    await repo.toggle_status(done.id)

    assert [t.id for t in await repo.get_by_status(False)] == [open_todo.id]
    assert [t.id for t in await repo.get_by_status(True)] == [done.id]


async def test_update_sets_both_fields(repo):
    todo = await repo.create("Buy milk")
    updated = await repo.update(todo.id, "Buy milk and eggs", True)
    assert updated.model_dump() == {"id": todo.id, "task": "Buy milk and eggs", "completed": True}
    assert await repo.get_by_id(todo.id) == updated


async def test_update_missing_returns_none(repo):
    assert await repo.update(99, "nothing", True) is None


async def test_toggle_twice_restores_status(repo):
    todo = await repo.create("Flip")
    once = await repo.toggle_status(todo.id)
    twice = await repo.toggle_status(todo.id)
    assert once.completed is True
    assert twice.completed is False


async def test_toggle_missing_returns_none(repo):
    assert await repo.toggle_status(7) is None


async def test_delete_by_id_returns_deleted_row(repo):
    todo = await repo.create("Temporary")
    deleted = await repo.delete_by_id(todo.id)
    assert deleted == todo
    assert await repo.get_by_id(todo.id) is None
    assert await repo.delete_by_id(todo.id) is None


async def test_ids_are_not_reused_after_delete(repo):
    first = await repo.create("first")
    await repo.delete_by_id(first.id)
    second = await repo.create("second")
    assert second.id > first.id


async def test_delete_by_status_only_removes_matching(repo):
    keep = await repo.create("keep")
    drop = await repo.create("drop")
    await repo.toggle_status(drop.id)

    await repo.delete_by_status(True)

    assert await repo.get_by_status(True) == []
    assert [t.id for t in await repo.get_all()] == [keep.id]


async def test_delete_by_task(repo):
    await repo.create("dup")
    await repo.create("dup")
    other = await repo.create("other")

    await repo.delete_by_task("dup")

    assert await repo.get_all() == [other]


async def test_delete_all(repo):
    await repo.create("one")
    await repo.create("two")
    assert await repo.delete_all() is None
    assert await repo.get_all() == []


async def test_ensure_schema_is_idempotent(storage, repo):
    todo = await repo.create("survives")
    await storage.ensure_schema()
    await storage.ensure_schema()
    assert await repo.get_all() == [todo]


async def test_storage_execute_returns_mappings(storage, repo):
    await repo.create("raw")
    rows = await storage.execute(select(todos.c.task))
    assert [r["task"] for r in rows] == ["raw"]


class FailingStorage:
    def __init__(self, kind):
        self.kind = kind
        self.calls = 0

    async def execute(self, statement, parameters=None):
        self.calls += 1
        raise TodoError(self.kind, "boom", cause=RuntimeError("driver said no"))


@pytest.mark.parametrize("kind", [ErrorKind.CONNECTION, ErrorKind.QUERY])
async def test_storage_errors_are_wrapped_with_operation(kind):
    storage = FailingStorage(kind)
    repo = TodoRepository(storage)

    with pytest.raises(TodoError) as info:
        await repo.get_by_id(1)

    err = info.value
    assert err.kind is ErrorKind.REPOSITORY
    assert err.operation == "get_todo_by_id"
    assert err.origin is kind
    assert isinstance(err.cause, TodoError)
    assert err.__cause__ is err.cause
    # no retries
    assert storage.calls == 1


async def test_delete_operations_wrap_errors_too():
    repo = TodoRepository(FailingStorage(ErrorKind.QUERY))
    with pytest.raises(TodoError) as info:
        await repo.delete_by_status(True)
    assert info.value.operation == "delete_todos_by_status"


async def test_null_completed_reads_as_open(storage, repo):
    await storage.execute(text("INSERT INTO todos (task, completed) VALUES ('imported', NULL)"))

    rows = await repo.get_all()
    assert [(t.task, t.completed) for t in rows] == [("imported", False)]
    assert (await repo.get_by_status(False)) == []
