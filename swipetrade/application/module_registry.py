from fastapi import FastAPI
from dependency_injector import providers
from swipetrade.application.container import container as root_container


def register_modules(app: FastAPI):
    # Register Health Module
    from swipetrade.domain.health.module import HealthModule
    from swipetrade.domain.health.controller import router as health_router

    health_module = HealthModule(
        root=providers.DependenciesContainer(
            record_store=root_container.record_store,
        )
    )
    health_module.wire(modules=["swipetrade.domain.health.controller"])

    app.include_router(health_router)
    app.state.health_module = health_module

    # Register Tokens Module
    from swipetrade.domain.tokens.tokens_module import TokensModule
    from swipetrade.domain.tokens.controller import router as tokens_router

    tokens_module = TokensModule(
        root=providers.DependenciesContainer(
            discovery=root_container.discovery,
        )
    )
    tokens_module.wire(modules=["swipetrade.domain.tokens.controller"])

    app.include_router(tokens_router)
    app.state.tokens_module = tokens_module

    # Register Users Module
    from swipetrade.domain.users.users_module import UsersModule
    from swipetrade.domain.users.controller import router as users_router

    users_module = UsersModule(
        root=providers.DependenciesContainer(
            record_store=root_container.record_store,
            config=root_container.config,
        )
    )
    users_module.wire(modules=["swipetrade.domain.users.controller"])

    app.include_router(users_router)
    app.state.users_module = users_module

    # Register Portfolio Module
    from swipetrade.domain.portfolio.portfolio_module import PortfolioModule
    from swipetrade.domain.portfolio.controller import router as portfolio_router

    portfolio_module = PortfolioModule(
        root=providers.DependenciesContainer(
            record_store=root_container.record_store,
            config=root_container.config,
        )
    )
    portfolio_module.wire(modules=["swipetrade.domain.portfolio.controller"])

    app.include_router(portfolio_router)
    app.state.portfolio_module = portfolio_module

    # Register Trading Module
    from swipetrade.domain.trading.trading_module import TradingModule
    from swipetrade.domain.trading.controller import router as trading_router

    trading_module = TradingModule(
        root=providers.DependenciesContainer(
            record_store=root_container.record_store,
            swap_client=root_container.swap_client,
            config=root_container.config,
        )
    )
    trading_module.wire(modules=["swipetrade.domain.trading.controller"])

    app.include_router(trading_router)
    app.state.trading_module = trading_module
