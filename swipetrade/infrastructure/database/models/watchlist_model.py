"""
Watchlist Database Model
"""

from sqlalchemy import Column, String, Integer, DateTime, JSON

from swipetrade.infrastructure.database.models.base import BaseModel, utcnow


class WatchlistModel(BaseModel):
    """Watchlist database model."""
    __tablename__ = 'watchlists'

    account = Column(String, primary_key=True)
    tokens = Column(JSON, nullable=False, default=list)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    version = Column(Integer, nullable=False, default=0)
