"""
Activity Database Model

Append-only log of executed trades.
"""

from sqlalchemy import Column, String, Float, JSON, Index
from uuid import uuid4

from swipetrade.infrastructure.database.models.base import BaseModel


class ActivityModel(BaseModel):
    """Activity database model."""

    __tablename__ = 'activities'

    id = Column(String, primary_key=True, default=lambda: str(uuid4()))
    account = Column(String, nullable=False)
    token = Column(JSON, nullable=False)
    action = Column(String, nullable=False)
    amount = Column(Float, nullable=False)
    transaction_id = Column(String, nullable=True)

    __table_args__ = (
        Index("ix_activities_account_created_at", "account", "created_at"),
    )
