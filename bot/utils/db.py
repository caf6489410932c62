from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.db import engine


def get_session() -> AsyncSession:
    """Open a session for use outside FastAPI's dependency injection."""
    return AsyncSession(engine, expire_on_commit=False)
