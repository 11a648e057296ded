# app/models/enums/discount_type.py
import enum


class DiscountType(str, enum.Enum):
    individual_percentage = "individual_percentage"
    individual_amount = "individual_amount"
    bulk_percentage = "bulk_percentage"
    bulk_amount = "bulk_amount"


# Only per-registration discounts can be evaluated against a single class
INDIVIDUAL_DISCOUNT_TYPES = (
    DiscountType.individual_percentage,
    DiscountType.individual_amount,
)


class DiscountKind(str, enum.Enum):
    percentage = "percentage"
    amount = "amount"
