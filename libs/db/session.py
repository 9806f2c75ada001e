from typing import AsyncGenerator

from libs.db.config import get_sessionmaker
from sqlalchemy.ext.asyncio import AsyncSession


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield an async database session for one unit of work and close it.
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
        finally:
            await session.close()
