from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from eventhub.core.config import settings

if settings.is_sqlite:
    # SQLite serialises writers itself, a pool only adds lock contention
    engine_options = {"poolclass": NullPool}
else:
    engine_options = {
        "pool_size": 20,           # Number of permanent connections to maintain
        "max_overflow": 10,        # Maximum number of connections to allow beyond pool_size
        "pool_pre_ping": True,     # Verify connections before using them
        "pool_recycle": 3600,      # Recycle connections after 1 hour
    }

engine = create_async_engine(settings.DATABASE_URL, echo=False, **engine_options)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
Base = declarative_base()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
