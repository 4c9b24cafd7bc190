from typing import Optional

from fastapi import Depends, HTTPException, status

from todo_api.database import StorageHandle, get_storage
from todo_api.repositories.todo_repo import TodoRepository
from todo_api.schemas.todo import TodoCreate, TodoOut, TodoUpdate


def _found(todo: Optional[TodoOut]) -> TodoOut:
    if todo is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    return todo


class TodoController:
    """Turns request values into a single repository call each."""

    def __init__(self, repo: TodoRepository):
        self.repo = repo

    async def list_todos(self, completed: Optional[bool] = None, task: Optional[str] = None) -> list[TodoOut]:
        if task is not None:
            todo = await self.repo.get_by_task(task)
            return [todo] if todo else []
        if completed is not None:
            return await self.repo.get_by_status(completed)
        return await self.repo.get_all()

    async def get_todo(self, todo_id: int) -> TodoOut:
        return _found(await self.repo.get_by_id(todo_id))

    async def create_todo(self, todo_in: TodoCreate) -> TodoOut:
        return await self.repo.create(todo_in.task)

    async def update_todo(self, todo_id: int, todo_in: TodoUpdate) -> TodoOut:
        return _found(await self.repo.update(todo_id, todo_in.task, todo_in.completed))

    async def toggle_todo(self, todo_id: int) -> TodoOut:
        return _found(await self.repo.toggle_status(todo_id))

    async def delete_todo(self, todo_id: int) -> TodoOut:
        return _found(await self.repo.delete_by_id(todo_id))

    async def delete_todos(self, completed: Optional[bool] = None, task: Optional[str] = None) -> None:
        if task is not None:
            await self.repo.delete_by_task(task)
        elif completed is not None:
            await self.repo.delete_by_status(completed)
        else:
            await self.repo.delete_all()


def get_controller(storage: StorageHandle = Depends(get_storage)) -> TodoController:
    return TodoController(TodoRepository(storage))
