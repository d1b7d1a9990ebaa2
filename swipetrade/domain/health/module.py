from dependency_injector import containers, providers
from .service import HealthService


class HealthModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    service = providers.Factory(
        HealthService,
        store=root.record_store,
    )
