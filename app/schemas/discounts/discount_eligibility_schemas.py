# app/schemas/discounts/discount_eligibility_schemas.py

import enum
from datetime import date
from decimal import Decimal
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from app.models.enums.discount_type import DiscountKind, DiscountType


# =====================================================
# DEFINITION (read from the store)
# =====================================================

class ClassRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    class_id: str
    is_eligible: bool


class DiscountDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    external_id: str
    discount_type: DiscountType
    discount_percent: Optional[Decimal] = None
    discount_amount: Optional[Decimal] = None
    is_universal: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rules: tuple[ClassRule, ...] = ()


# =====================================================
# RESULT
# =====================================================

class EligibleDiscount(BaseModel):
    """A discount that applies to the requested class.

    ``value`` is a negative adjustment: a fraction of the price for
    percentage discounts, a currency amount otherwise. ``applies_to`` and
    ``excludes`` cover every class rule on the code, not only the
    requested class.
    """

    code: str
    external_id: str
    type: DiscountKind
    value: Decimal
    universal: bool
    applies_to: List[str] = []
    excludes: List[str] = []


class RejectionReason(str, enum.Enum):
    invalid_code = "invalid_code"
    not_started = "not_started"
    expired = "expired"
    excluded_for_class = "excluded_for_class"
    not_applicable = "not_applicable"


class DiscountAccepted(BaseModel):
    status: Literal["eligible"] = "eligible"
    discount: EligibleDiscount


class DiscountRejected(BaseModel):
    status: Literal["rejected"] = "rejected"
    reason: RejectionReason
    message: str


EligibilityResult = Union[DiscountAccepted, DiscountRejected]
