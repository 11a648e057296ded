# Discounts
from app.models.discounts.discount_code_models import DiscountCode, DiscountClassRule
