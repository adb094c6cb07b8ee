from __future__ import annotations

import pytest

from newsletter.db.session import create_engine_for, create_sessionmaker, init_models


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def session(anyio_backend, tmp_path):
    """AsyncSession bound to a fresh SQLite file with all tables created."""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    factory = create_sessionmaker(engine)
    async with factory() as db:
        yield db
    await engine.dispose()
