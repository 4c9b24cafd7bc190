import logging
from typing import Any, Mapping, Optional

from sqlalchemy import Boolean, Integer, Text, bindparam, delete, insert, not_, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.sql.expression import Executable

from todo_api.database import StorageHandle
from todo_api.errors import ErrorKind, TodoError
from todo_api.models.todo import Todo
from todo_api.schemas.todo import TodoOut

logger = logging.getLogger(__name__)

todos = Todo.__table__

# bind names must differ from column names, or insert/update claim them for VALUES/SET
_ID = bindparam("todo_id", type_=Integer)
_MATCH_TASK = bindparam("match_task", type_=Text)
_MATCH_COMPLETED = bindparam("match_completed", type_=Boolean)

INSERT_TODO = insert(todos).values(task=bindparam("new_task", type_=Text)).returning(*todos.c)
SELECT_ALL = select(todos).order_by(todos.c.id)
SELECT_BY_ID = select(todos).where(todos.c.id == _ID)
SELECT_BY_TASK = select(todos).where(todos.c.task == _MATCH_TASK).order_by(todos.c.id).limit(1)
SELECT_BY_STATUS = select(todos).where(todos.c.completed == _MATCH_COMPLETED).order_by(todos.c.id)
UPDATE_TODO = (
    update(todos)
    .where(todos.c.id == _ID)
    .values(
        task=bindparam("new_task", type_=Text),
        completed=bindparam("new_completed", type_=Boolean),
    )
    .returning(*todos.c)
)
TOGGLE_STATUS = update(todos).where(todos.c.id == _ID).values(completed=not_(todos.c.completed)).returning(*todos.c)
DELETE_BY_ID = delete(todos).where(todos.c.id == _ID).returning(*todos.c)
DELETE_ALL = delete(todos)
DELETE_BY_STATUS = delete(todos).where(todos.c.completed == _MATCH_COMPLETED)
DELETE_BY_TASK = delete(todos).where(todos.c.task == _MATCH_TASK)


def _to_todo(row: RowMapping) -> TodoOut:
    data = dict(row)
    # the column is nullable; rows written outside the API may carry NULL
    data["completed"] = bool(data["completed"])
    return TodoOut.model_validate(data)


class TodoRepository:
    """
    One method per todo action, each running exactly one statement.

    A missing row is returned as ``None``. Storage failures come back as a
    REPOSITORY TodoError that names the operation and keeps the storage error
    as its cause.
    """

    def __init__(self, storage: StorageHandle) -> None:
        self.storage = storage

    async def _run(
        self,
        operation: str,
        statement: Executable,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> list[RowMapping]:
        try:
            return await self.storage.execute(statement, parameters)
        except TodoError as exc:
            logger.error("Repository operation %s failed: %s", operation, exc)
            raise TodoError(
                ErrorKind.REPOSITORY,
                f"could not {operation.replace('_', ' ')}",
                operation=operation,
                cause=exc,
            ) from exc

    async def _one(self, operation: str, statement: Executable, parameters: Mapping[str, Any]) -> Optional[TodoOut]:
        rows = await self._run(operation, statement, parameters)
        return _to_todo(rows[0]) if rows else None

    async def create(self, task: str) -> TodoOut:
        rows = await self._run("create_todo", INSERT_TODO, {"new_task": task})
        return _to_todo(rows[0])

    async def get_all(self) -> list[TodoOut]:
        rows = await self._run("get_todos", SELECT_ALL)
        return [_to_todo(r) for r in rows]

    async def get_by_id(self, todo_id: int) -> Optional[TodoOut]:
        return await self._one("get_todo_by_id", SELECT_BY_ID, {"todo_id": todo_id})

    async def get_by_task(self, task: str) -> Optional[TodoOut]:
        return await self._one("get_todo_by_task", SELECT_BY_TASK, {"match_task": task})

    async def get_by_status(self, completed: bool) -> list[TodoOut]:
        rows = await self._run("get_todos_by_status", SELECT_BY_STATUS, {"match_completed": completed})
        return [_to_todo(r) for r in rows]

    async def update(self, todo_id: int, task: str, completed: bool) -> Optional[TodoOut]:
        return await self._one(
            "update_todo",
            UPDATE_TODO,
            {"todo_id": todo_id, "new_task": task, "new_completed": completed},
        )

    async def toggle_status(self, todo_id: int) -> Optional[TodoOut]:
        return await self._one("toggle_todo_status", TOGGLE_STATUS, {"todo_id": todo_id})

    async def delete_by_id(self, todo_id: int) -> Optional[TodoOut]:
        return await self._one("delete_todo", DELETE_BY_ID, {"todo_id": todo_id})

    async def delete_all(self) -> None:
        await self._run("delete_all_todos", DELETE_ALL)

    async def delete_by_status(self, completed: bool) -> None:
        await self._run("delete_todos_by_status", DELETE_BY_STATUS, {"match_completed": completed})

    async def delete_by_task(self, task: str) -> None:
        await self._run("delete_todos_by_task", DELETE_BY_TASK, {"match_task": task})
