from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT = "InvalidInput"
    QUOTE_UNAVAILABLE = "QuoteUnavailable"
    BUILD_FAILED = "BuildFailed"
    SUBMIT_FAILED = "SubmitFailed"
    STORE_UNAVAILABLE = "StoreUnavailable"
    STORE_CONFLICT = "StoreConflict"
    DISCOVERY_UNAVAILABLE = "DiscoveryUnavailable"
    TRADE_IN_PROGRESS = "TradeInProgress"


class SwipeTradeError(Exception):
    """Base error for every failure surfaced by the trading core."""
    kind: ErrorKind

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)
        self.message = message or self.kind.value


class InvalidInput(SwipeTradeError):
    kind = ErrorKind.INVALID_INPUT


class QuoteUnavailable(SwipeTradeError):
    kind = ErrorKind.QUOTE_UNAVAILABLE


class BuildFailed(SwipeTradeError):
    kind = ErrorKind.BUILD_FAILED


class SubmitFailed(SwipeTradeError):
    kind = ErrorKind.SUBMIT_FAILED


class StoreUnavailable(SwipeTradeError):
    kind = ErrorKind.STORE_UNAVAILABLE


class StoreConflict(SwipeTradeError):
    kind = ErrorKind.STORE_CONFLICT


class DiscoveryUnavailable(SwipeTradeError):
    """Discovery failed; callers fall back to static token data."""
    kind = ErrorKind.DISCOVERY_UNAVAILABLE


class TradeInProgress(SwipeTradeError):
    kind = ErrorKind.TRADE_IN_PROGRESS
