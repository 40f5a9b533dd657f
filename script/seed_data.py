#!/usr/bin/env python3
"""
Database Seed Script
Populate demo theaters and showtimes into the database

Features:
1. Create Tables - create the schema if it does not exist
2. Create Theaters - a few halls of different capacity
3. Create Showtimes - tomorrow's screenings, counter starting at capacity
4. Print Tokens - bearer tokens for demo customers

Notes:
- Seat claims are not pre-seeded; they are created on the first booking or hold
- Customer accounts live in the account service, only their ids are needed here
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.orm_db_setting import Database
from src.service.ticketing.driven_adapter.model.showtime_model import ShowtimeModel
from src.service.ticketing.driven_adapter.model.theater_model import TheaterModel
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


@dataclass
class TheaterConfig:
    """Theater seed configuration"""

    name: str
    capacity: int
    price: Decimal


THEATERS = [
    TheaterConfig(name='Hall 1', capacity=120, price=Decimal('12.50')),
    TheaterConfig(name='Hall 2', capacity=80, price=Decimal('9.75')),
    TheaterConfig(name='IMAX', capacity=200, price=Decimal('18.40')),
]
SCREENING_TIMES = [time(14, 0), time(17, 30), time(21, 0)]
DEMO_CUSTOMER_IDS = [1, 2]


async def create_theaters(session: AsyncSession) -> List[int]:
    print(f'🏛️ Creating {len(THEATERS)} theaters...')
    theater_ids = []
    for config in THEATERS:
        result = await session.execute(
            insert(TheaterModel.__table__)
            .values(name=config.name, capacity=config.capacity)
            .returning(TheaterModel.__table__.c.id)
        )
        theater_id = result.scalar_one()
        theater_ids.append(theater_id)
        print(f'   ✅ Created theater: ID={theater_id}, Name={config.name}, Seats={config.capacity}')
    return theater_ids


async def create_showtimes(
    session: AsyncSession, theater_ids: List[int], day: Optional[datetime] = None
) -> int:
    """Create one showtime per theater and screening time on `day` (tomorrow by default)"""
    day = day or datetime.now(timezone.utc) + timedelta(days=1)
    print(f'🎬 Creating showtimes for {day.date()}...')

    created = 0
    for movie_id, (theater_id, config) in enumerate(zip(theater_ids, THEATERS), start=1):
        for screening in SCREENING_TIMES:
            start_time = datetime.combine(day.date(), screening, tzinfo=timezone.utc)
            await session.execute(
                insert(ShowtimeModel.__table__).values(
                    movie_id=movie_id,
                    theater_id=theater_id,
                    start_time=start_time,
                    end_time=start_time + timedelta(hours=2),
                    price=config.price,
                    available_seats=config.capacity,
                )
            )
            created += 1
    print(f'   ✅ Created showtimes: {created}')
    return created


async def verify_data(database: Database) -> dict[str, int]:
    """Verify seeded data"""
    print('🔍 Verifying seeded data...')

    counts = {}
    async with database.session_scope() as session:
        for model in (TheaterModel, ShowtimeModel):
            table = model.__table__
            result = await session.execute(select(func.count()).select_from(table))
            counts[table.name] = result.scalar_one()
            print(f'   {table.name.capitalize()} count: {counts[table.name]}')

    print('   ✅ Data verification completed!')
    return counts


async def seed(database: Database) -> None:
    """Seed theaters and showtimes in a single transaction"""
    await database.create_tables()
    async with database.session_scope() as session:
        try:
            theater_ids = await create_theaters(session)
            print()

            await create_showtimes(session, theater_ids)
            print()

            await session.commit()
            print('✅ All data committed successfully!')

        except Exception as e:
            await session.rollback()
            print(f'❌ Rolling back: {e}')
            raise


async def main() -> None:
    print('🌱 Starting data seeding...')
    print('=' * 50)

    database = Database()
    try:
        await seed(database)
        await verify_data(database)

        print()
        print('=' * 50)
        print('🌱 Data seeding completed!')
        print('📋 Demo bearer tokens:')
        jwt_auth = JwtAuth()
        for customer_id in DEMO_CUSTOMER_IDS:
            print(f'   Customer {customer_id}: {jwt_auth.create_jwt_token(customer_id=customer_id)}')

    except Exception as e:
        print(f'❌ Seeding failed: {e}')
        exit(1)

    finally:
        await database.dispose()


if __name__ == '__main__':
    asyncio.run(main())
