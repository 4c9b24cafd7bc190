from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from todo_api.controllers.todo_controller import TodoController, get_controller
from todo_api.schemas.todo import TodoCreate, TodoOut, TodoUpdate

router = APIRouter()


@router.get("", response_model=list[TodoOut])
async def get_todos(
    completed: Optional[bool] = None,
    task: Optional[str] = None,
    controller: TodoController = Depends(get_controller),
):
    return await controller.list_todos(completed=completed, task=task)


@router.get("/{todo_id}", response_model=TodoOut)
async def get_todo_by_id(todo_id: int, controller: TodoController = Depends(get_controller)):
    return await controller.get_todo(todo_id)


@router.post("", response_model=TodoOut, status_code=201)
async def create_todo(todo_in: TodoCreate, controller: TodoController = Depends(get_controller)):
    return await controller.create_todo(todo_in)


@router.put("/toggle/{todo_id}", response_model=TodoOut)
async def toggle_todo_status(todo_id: int, controller: TodoController = Depends(get_controller)):
    return await controller.toggle_todo(todo_id)


@router.put("/{todo_id}", response_model=TodoOut)
async def update_todo(todo_id: int, todo_in: TodoUpdate, controller: TodoController = Depends(get_controller)):
    return await controller.update_todo(todo_id, todo_in)


@router.delete("/{todo_id}", response_model=TodoOut)
async def delete_todo(todo_id: int, controller: TodoController = Depends(get_controller)):
    return await controller.delete_todo(todo_id)


@router.delete("", status_code=204)
async def delete_todos(
    completed: Optional[bool] = None,
    task: Optional[str] = None,
    controller: TodoController = Depends(get_controller),
):
    await controller.delete_todos(completed=completed, task=task)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
