"""
Booking Service - Main Application
Books, cancels and holds cinema seats for showtimes.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from src.platform.app_factory import create_app
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown"""
    Logger.base.info('🚀 [Booking Service] Starting up...')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Booking Service] Dependency injection wired')

    backend = container.config_service().STORAGE_BACKEND
    if backend == 'postgres':
        await container.database().create_tables()
    Logger.base.info(f'🗄️ [Booking Service] Storage backend: {backend}')

    Logger.base.info('✅ [Booking Service] Startup complete')

    yield

    Logger.base.info('🛑 [Booking Service] Shutting down...')
    if backend == 'postgres':
        await container.database().dispose()
    container.unwire()
    Logger.base.info('👋 [Booking Service] Shutdown complete')


app = create_app(lifespan=lifespan)
