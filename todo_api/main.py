import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from todo_api.database import StorageHandle
from todo_api.errors import install_error_handlers
from todo_api.repositories.todo_repo import TodoRepository
from todo_api.routers import todo_router
from todo_api.seed import seed_todos
from todo_api.settings import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        storage = StorageHandle.from_settings(settings)
        try:
            await storage.ensure_schema()
            if settings.seed_data:
                await seed_todos(TodoRepository(storage))
            app.state.storage = storage
            yield
        finally:
            await storage.close()

    app = FastAPI(title="Todo API", lifespan=lifespan)
    app.include_router(todo_router.router, prefix="/todos", tags=["Todos"])
    install_error_handlers(app)

    # Root health
    @app.get("/")
    async def read_root():
        return {"status": "ok"}

    return app


app = create_app()
