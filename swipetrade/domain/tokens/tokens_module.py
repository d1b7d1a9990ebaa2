from dependency_injector import containers, providers
from swipetrade.domain.tokens.token_service import TokenService


class TokensModule(containers.DeclarativeContainer):
    root = providers.DependenciesContainer()

    token_service = providers.Factory(
        TokenService,
        discovery=root.discovery,
    )
