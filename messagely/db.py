"""Async engine and session factory over the users/messages store."""
import logging

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from .models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns one engine. Every unit of work opens its own session via ``session()``."""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine = create_async_engine(url, future=True, echo=echo)
        self.sessionmaker = sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    def session(self) -> AsyncSession:
        return self.sessionmaker()

    async def create_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info({'msg': 'tables_ready', 'tables': sorted(Base.metadata.tables)})

    async def dispose(self):
        await self.engine.dispose()
