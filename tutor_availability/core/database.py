from sqlalchemy import Column, String, DateTime
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from typing import AsyncIterator
import uuid

from tutor_availability.core.config import settings


class BaseModel:
    """Columns shared by every table"""

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


Base = declarative_base(cls=BaseModel)

engine = create_async_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request"""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db(bind=None):
    """Create all tables"""
    # Import models so they register on Base.metadata
    from tutor_availability import models  # noqa: F401

    bind = bind if bind is not None else engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
