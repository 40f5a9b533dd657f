from pathlib import Path

import pytest

from script.seed_data import SCREENING_TIMES, THEATERS, seed, verify_data
from src.platform.database.orm_db_setting import Database


@pytest.mark.integration
@pytest.mark.asyncio
async def test_seed_creates_theaters_and_showtimes(tmp_path: Path) -> None:
    database = Database(url=f'sqlite+aiosqlite:///{tmp_path / "seed.db"}')
    try:
        await seed(database)

        counts = await verify_data(database)
    finally:
        await database.dispose()

    assert counts == {
        'theater': len(THEATERS),
        'showtime': len(THEATERS) * len(SCREENING_TIMES),
    }
