"""
Catalog Models for the workflow server
Rows mirrored from the payments provider into the backend database
"""

from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class PriceType(str, Enum):
    ONE_TIME = "one_time"
    RECURRING = "recurring"


class PriceInterval(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ProductRecord(BaseModel):
    """Row in the products table"""
    id: str
    active: bool
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PriceRecord(BaseModel):
    """Row in the prices table"""
    id: str
    product_id: str
    active: bool
    currency: str
    description: Optional[str] = None
    type: PriceType
    unit_amount: Optional[int] = None
    interval: Optional[PriceInterval] = None
    interval_count: Optional[int] = None
    trial_period_days: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SubscriptionRecord(BaseModel):
    """Row in the subscriptions table; timestamps are ISO-8601 UTC strings"""
    id: str
    user_id: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    status: str
    price_id: str
    quantity: Optional[int] = None
    cancel_at_period_end: bool = False
    cancel_at: Optional[str] = None
    canceled_at: Optional[str] = None
    current_period_start: Optional[str] = None
    current_period_end: Optional[str] = None
    ended_at: Optional[str] = None
    trial_start: Optional[str] = None
    trial_end: Optional[str] = None
