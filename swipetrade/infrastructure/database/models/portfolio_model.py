"""
Portfolio Database Model

Holdings are stored as a JSON list of token snapshots with held amounts.
`version` backs compare-and-swap writes.
"""

from sqlalchemy import Column, String, Integer, DateTime, JSON

from swipetrade.infrastructure.database.models.base import BaseModel, utcnow


class PortfolioModel(BaseModel):
    """Portfolio database model."""
    __tablename__ = 'portfolios'

    account = Column(String, primary_key=True)
    tokens = Column(JSON, nullable=False, default=list)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    version = Column(Integer, nullable=False, default=0)
