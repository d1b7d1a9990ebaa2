from dependency_injector import containers, providers
from swipetrade.domain.portfolio.portfolio_service import PortfolioService


class PortfolioModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    portfolio_service = providers.Factory(
        PortfolioService,
        store=root.record_store,
        max_write_attempts=root.config.provided.reconcile_max_attempts,
    )
