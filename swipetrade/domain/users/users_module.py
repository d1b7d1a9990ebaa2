from dependency_injector import containers, providers
from swipetrade.domain.users.users_service import UsersService


class UsersModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    users_service = providers.Factory(
        UsersService,
        store=root.record_store,
        fallback_trade_amount=root.config.provided.default_trade_amount,
    )
