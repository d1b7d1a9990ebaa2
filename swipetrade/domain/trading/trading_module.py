from dependency_injector import containers, providers
from .trading_service import TradingService


class TradingModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    # Singleton: the per-account in-flight registry must be shared by all requests.
    trading_service = providers.Singleton(
        TradingService,
        store=root.record_store,
        swap=root.swap_client,
        slippage_bps=root.config.provided.slippage_bps,
        reconcile_max_attempts=root.config.provided.reconcile_max_attempts,
        step_timeout=root.config.provided.submit_timeout_seconds,
    )
