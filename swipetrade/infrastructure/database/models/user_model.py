"""
User Database Model

One row per wallet account.
"""

from sqlalchemy import Column, String, Float

from swipetrade.infrastructure.database.models.base import BaseModel


class UserModel(BaseModel):
    """User database model."""

    __tablename__ = 'users'

    account = Column(String, primary_key=True)
    email = Column(String, nullable=True)
    default_trade_amount = Column(Float, nullable=False)
