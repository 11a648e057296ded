# app/schemas/discounts/discount_code_schemas.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List

from app.models.enums.discount_type import DiscountType


class ClassRuleCreate(BaseModel):
    class_id: str = Field(..., min_length=1, max_length=36)
    is_eligible: bool = True


class ClassRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    class_id: str
    is_eligible: bool


class DiscountCodeCreate(BaseModel):
    # codes travel as a single URL path segment
    code: str = Field(..., min_length=1, max_length=80, pattern=r"^[A-Za-z0-9_.-]+$")
    external_id: str = Field(..., min_length=1, max_length=36)
    name: Optional[str] = None
    discount_type: DiscountType
    discount_percent: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    is_universal: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    note: Optional[str] = None
    rules: List[ClassRuleCreate] = []


class DiscountCodeOut(BaseModel):
    id: int
    external_id: str
    code: str
    name: Optional[str]
    discount_type: DiscountType
    discount_percent: Optional[Decimal]
    discount_amount: Optional[Decimal]
    is_universal: bool
    start_date: Optional[date]
    end_date: Optional[date]
    note: Optional[str]
    rules: List[ClassRuleOut]

    created_at: Optional[datetime]
    updated_at: Optional[datetime]


class DiscountCodeListData(BaseModel):
    total: int
    items: List[DiscountCodeOut]
