"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.ticketing.driven_adapter.memory.in_memory_store import InMemoryStore
from src.service.ticketing.driven_adapter.memory.in_memory_unit_of_work import (
    InMemoryUnitOfWork,
)
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Storage backends
    database = providers.Singleton(Database)
    in_memory_store = providers.Singleton(InMemoryStore)

    # A fresh unit of work per use case call, backend picked by STORAGE_BACKEND
    unit_of_work = providers.Selector(
        config_service.provided.STORAGE_BACKEND,
        postgres=providers.Factory(SqlAlchemyUnitOfWork, session_factory=database.provided.session),
        memory=providers.Factory(InMemoryUnitOfWork, store=in_memory_store),
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
