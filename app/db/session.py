from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings

engine = create_async_engine(
    settings.get_async_database_url(),
    echo=settings.DATABASE_ECHO,
    pool_pre_ping=True,
)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


def get_session_factory() -> async_sessionmaker:
    """
    Dependency returning the session factory rather than a single session.
    Dashboard queries fan out concurrently and each needs its own session.
    """
    return SessionLocal
