from pathlib import Path
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parents[3] / ".env"  # noqa: E402
load_dotenv(dotenv_path=ENV_PATH)  # noqa: E402

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator
from typing import List, Literal, Optional
from enum import Enum
import logging

from swipetrade.commons.enums.trade_enums import StoreBackendEnum


logger = logging.getLogger(__name__)

POSTGRES_SCHEMES = ("postgresql://", "postgresql+asyncpg://", "postgresql+psycopg://")


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    # ============= RECORD STORE =============
    db_url: Optional[str] = Field(
        default=None,
        description="PostgreSQL connection URL, required by the postgres backend"
    )
    db_pool_size: int = Field(default=5, ge=1, le=50)
    db_max_overflow: int = Field(default=10, ge=0, le=100)
    db_pool_timeout: int = Field(default=30, ge=1)
    db_pool_recycle: int = Field(default=3600, description="Recycle connections after N seconds")
    db_echo: bool = Field(default=False, description="Log all SQL statements")
    store_backend: StoreBackendEnum = Field(
        default=StoreBackendEnum.POSTGRES,
        description="postgres for the real database, memory for local runs without one"
    )
    store_timeout_seconds: float = Field(default=5.0, gt=0)

    # ============= APPLICATION =============
    app_name: str = Field(default="SwipeTrade API")
    app_version: str = Field(default="0.1.0")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # ============= CORS =============
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma separated origins allowed to call the API"
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["*"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # ============= SOLANA / JUPITER / DEXSCREENER =============
    jupiter_base_url: str = Field(default="https://lite-api.jup.ag/swap/v1")
    solana_rpc_url: str = Field(default="https://api.mainnet-beta.solana.com")
    dexscreener_base_url: str = Field(default="https://api.dexscreener.com")
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    submit_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for the signer to sign and send a swap"
    )
    trending_limit: int = Field(default=20, ge=1, le=100)

    # ============= TRADING =============
    slippage_bps: int = Field(
        default=100,
        ge=1,
        le=10_000,
        description="Slippage tolerance in basis points sent with every quote"
    )
    default_trade_amount: float = Field(
        default=0.001,
        gt=0,
        description="Default SOL amount per swipe for new users"
    )
    reconcile_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Version-conflict retries for portfolio and watchlist writes"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        validate_default=True,
    )

    @property
    def async_database_url(self) -> Optional[str]:
        if self.db_url is None:
            return None
        for scheme in ("postgresql://", "postgresql+psycopg://"):
            if self.db_url.startswith(scheme):
                return "postgresql+asyncpg://" + self.db_url[len(scheme):]
        return self.db_url

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @field_validator("db_url")
    @classmethod
    def validate_database_url(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.startswith(POSTGRES_SCHEMES):
            raise ValueError("Database URL must be a PostgreSQL URL")
        return v

    @model_validator(mode="after")
    def require_database_for_postgres(self) -> "Settings":
        if self.store_backend == StoreBackendEnum.POSTGRES and not self.db_url:
            raise ValueError("DB_URL is required when STORE_BACKEND=postgres")
        return self

    def get_logging_config(self) -> dict:
        sql_level = "INFO" if self.db_echo else "WARNING"
        quiet = {
            "uvicorn": self.log_level,
            "httpx": "WARNING",
            "httpcore": "WARNING",
            "sqlalchemy": sql_level,
            "sqlalchemy.engine": sql_level,
        }
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": self.log_format}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": self.log_level,
                }
            },
            "root": {"level": self.log_level, "handlers": ["console"]},
            "loggers": {
                name: {"level": level, "handlers": ["console"], "propagate": False}
                for name, level in quiet.items()
            },
        }
