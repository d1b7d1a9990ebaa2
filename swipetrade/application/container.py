from dependency_injector import containers, providers
from swipetrade.infrastructure.config.settings import Settings
from swipetrade.infrastructure.database.client import PostgresClient
from swipetrade.infrastructure.database.record_store import SqlRecordStore
from swipetrade.infrastructure.database.memory_store import InMemoryRecordStore
from swipetrade.infrastructure.swap.jupiter import JupiterClient
from swipetrade.infrastructure.data.dexscreener import DexScreenerService


class Container(containers.DeclarativeContainer):
    config = providers.Singleton(Settings)

    db_client = providers.Singleton(
        PostgresClient,
        db_url=config.provided.async_database_url,
        pool_size=config.provided.db_pool_size,
        max_overflow=config.provided.db_max_overflow,
        pool_timeout=config.provided.db_pool_timeout,
        pool_recycle=config.provided.db_pool_recycle,
        echo=config.provided.db_echo,
        command_timeout=config.provided.store_timeout_seconds,
    )

    record_store = providers.Selector(
        config.provided.store_backend.value,
        postgres=providers.Singleton(
            SqlRecordStore,
            db_client=db_client,
            default_trade_amount=config.provided.default_trade_amount,
            timeout=config.provided.store_timeout_seconds,
        ),
        memory=providers.Singleton(
            InMemoryRecordStore,
            default_trade_amount=config.provided.default_trade_amount,
        ),
    )

    swap_client = providers.Singleton(
        JupiterClient,
        base_url=config.provided.jupiter_base_url,
        rpc_url=config.provided.solana_rpc_url,
        timeout=config.provided.http_timeout_seconds,
        submit_timeout=config.provided.submit_timeout_seconds,
    )

    discovery = providers.Singleton(
        DexScreenerService,
        base_url=config.provided.dexscreener_base_url,
        limit=config.provided.trending_limit,
        timeout=config.provided.http_timeout_seconds,
    )


container = Container()
