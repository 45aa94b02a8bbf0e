import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from backoffice.core.config import settings
from backoffice.core.errors import ConflictError, StorageFailureError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session; always closed, even when the handler raises."""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    One unit of work: commit on success, roll back on any exception.

    Constraint violations surface as ConflictError and other driver/ORM
    errors as StorageFailureError.
    """
    try:
        yield session
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Transaction rolled back on constraint violation: {e.orig}")
        raise ConflictError("Record conflicts with existing data") from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Transaction rolled back: {e}", exc_info=True)
        raise StorageFailureError("Database operation failed") from e
    except BaseException:
        await session.rollback()
        raise


async def init_db() -> None:
    """Create tables for local development. Deployments run `alembic upgrade head`."""
    import backoffice.models  # noqa: F401  (register mappers)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")
