import logging

from todo_api.repositories.todo_repo import TodoRepository

logger = logging.getLogger(__name__)

SEED_TODOS = [
    ("Buy groceries", False),
    ("Walk the dog", True),
    ("Finish the TypeScript project", False),
]


async def seed_todos(repo: TodoRepository) -> int:
    """Insert the demo rows into an empty table. Returns how many were added."""
    if await repo.get_all():
        return 0
    for task, completed in SEED_TODOS:
        todo = await repo.create(task)
        if completed:
            await repo.toggle_status(todo.id)
    logger.info("Inserted %d seed todos", len(SEED_TODOS))
    return len(SEED_TODOS)
