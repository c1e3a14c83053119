"""Database configuration and session management."""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from certverify.config import get_settings

settings = get_settings()


def _engine_options() -> dict:
    """Driver-specific engine options."""
    if settings.is_sqlite:
        return {
            "connect_args": {"timeout": settings.DB_CONNECT_TIMEOUT},
        }
    return {
        "pool_size": 20,
        "max_overflow": 50,
        "pool_pre_ping": True,
        "connect_args": {"timeout": settings.DB_CONNECT_TIMEOUT},
    }


engine = create_async_engine(
    settings.async_database_url,
    echo=False,  # Disable SQL query logging (too verbose)
    **_engine_options(),
)

# Create session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Base class for models
Base = declarative_base()


async def get_db() -> AsyncSession:
    """Dependency for getting database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
