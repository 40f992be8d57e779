# twofa/core/db.py
from collections.abc import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from twofa.core.config import settings


def make_engine(url: str) -> AsyncEngine:
    # hide_parameters: los UPDATE de 2FA llevan el secreto como parámetro
    # sqlite (tests / dev) no usa pool con pre-ping ni reciclado
    if url.startswith("sqlite"):
        return create_async_engine(url, echo=settings.DB_ECHO, hide_parameters=True)
    return create_async_engine(url, echo=settings.DB_ECHO, hide_parameters=True,
                               pool_pre_ping=True, pool_recycle=settings.DB_POOL_RECYCLE)

engine = make_engine(settings.async_database_url)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)

class Base(DeclarativeBase):
    pass

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Una sesión por request; el store hace commit/rollback por su cuenta."""
    async with SessionLocal() as session:
        yield session
