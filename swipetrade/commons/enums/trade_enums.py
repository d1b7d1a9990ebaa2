from enum import Enum


class TradeActionEnum(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class TradeStateEnum(str, Enum):
    START = "start"
    QUOTING = "quoting"
    BUILDING = "building"
    SUBMITTING = "submitting"
    RECORDING = "recording"
    RECONCILING = "reconciling"
    DONE = "done"
    FAILED = "failed"


class StoreBackendEnum(str, Enum):
    POSTGRES = "postgres"
    MEMORY = "memory"
