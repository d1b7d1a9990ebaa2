from .base import Base, BaseModel
from .user_model import UserModel
from .portfolio_model import PortfolioModel
from .watchlist_model import WatchlistModel
from .activity_model import ActivityModel


__all__ = [
    "Base",
    "BaseModel",
    "UserModel",
    "PortfolioModel",
    "WatchlistModel",
    "ActivityModel",
]
