import logging
from typing import Any, Mapping, Optional

from fastapi import Request
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql.expression import Executable

from todo_api.errors import ErrorKind, TodoError, describe_cause
from todo_api.settings import Settings

logger = logging.getLogger(__name__)

Base = declarative_base()


class StorageHandle:
    """
    Pooled access to one database.

    Every call checks a connection out of the pool and gives it back before
    returning, whether the statement succeeded or not.
    """

    def __init__(self, url: str, **engine_options: Any) -> None:
        engine_options.setdefault("pool_pre_ping", True)
        self.engine: AsyncEngine = create_async_engine(url, **engine_options)
        logger.info("Opened connection pool for %s", self.engine.url.render_as_string(hide_password=True))

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageHandle":
        options: dict[str, Any] = {}
        if not settings.database_url.startswith("sqlite"):
            options["pool_size"] = settings.pool_size
            options["max_overflow"] = settings.max_overflow
        return cls(settings.database_url, **options)

    async def _acquire(self) -> AsyncConnection:
        try:
            return await self.engine.connect()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("Could not acquire a database connection: %s", describe_cause(exc))
            raise TodoError(ErrorKind.CONNECTION, "could not acquire a database connection", cause=exc) from exc

    async def execute(
        self,
        statement: Executable,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> list[RowMapping]:
        """Run one parameterized statement in its own transaction and return its rows."""
        conn = await self._acquire()
        try:
            async with conn.begin():
                result = await conn.execute(statement, parameters)
                if not result.returns_rows:
                    return []
                return list(result.mappings().all())
        except SQLAlchemyError as exc:
            logger.error("Statement rejected by the database: %s", describe_cause(exc))
            raise TodoError(ErrorKind.QUERY, "statement rejected by the database", cause=exc) from exc
        finally:
            await conn.close()

    async def ensure_schema(self) -> None:
        # imported for its side effect of registering the table on Base.metadata
        from todo_api.models import todo  # noqa: F401

        conn = await self._acquire()
        try:
            async with conn.begin():
                await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        except SQLAlchemyError as exc:
            logger.error("Could not create the todos table: %s", describe_cause(exc))
            raise TodoError(ErrorKind.SCHEMA, "could not create the todos table", cause=exc) from exc
        finally:
            await conn.close()
        logger.info("Ensured that the todos table exists")

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Closed connection pool")


def get_storage(request: Request) -> StorageHandle:
    return request.app.state.storage
