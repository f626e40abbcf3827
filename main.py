"""
Taskboard application bootstrap.

Wires configuration, logging and the process-wide ``Database`` into the
account and task search services.  A boundary layer (HTTP handlers, a
CLI, a worker) holds one ``Application`` and opens a service per call::

    app = Application()
    await app.startup()
    async with app.accounts() as accounts:
        await accounts.login({"username": "alice", "password": "secret1"})
    await app.shutdown()
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from config.settings import Settings, config
from core.account_service import AccountService
from core.task_service import TaskSearchService
from database.session import Database
from database.stores import SqlTaskStore, SqlUserStore

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings = config) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


class Application:
    def __init__(self, settings: Settings = config, database: Optional[Database] = None):
        self.settings = settings
        self.database = database or Database(settings.database_url, **settings.engine_options())

    async def startup(self, create_tables: bool = False) -> None:
        if create_tables:
            await self.database.create_all()
        logger.info("Application ready (bcrypt rounds=%d)", self.settings.bcrypt_rounds)

    async def shutdown(self) -> None:
        await self.database.dispose()

    @asynccontextmanager
    async def accounts(self) -> AsyncIterator[AccountService]:
        async with self.database.session() as session:
            yield AccountService(
                SqlUserStore(session),
                bcrypt_rounds=self.settings.bcrypt_rounds,
            )

    @asynccontextmanager
    async def tasks(self) -> AsyncIterator[TaskSearchService]:
        async with self.database.session() as session:
            yield TaskSearchService(SqlTaskStore(session))


if __name__ == "__main__":
    import asyncio

    async def _main() -> None:
        configure_logging()
        app = Application()
        await app.startup(create_tables=True)
        await app.shutdown()

    asyncio.run(_main())
