# app/services/discounts/discount_eligibility_service.py

from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.core.config import DISCOUNT_TIMEZONE
from app.models.discounts.discount_code_models import DiscountCode
from app.models.enums.discount_type import INDIVIDUAL_DISCOUNT_TYPES
from app.schemas.discounts.discount_eligibility_schemas import (
    ClassRule,
    DiscountAccepted,
    DiscountDefinition,
    DiscountRejected,
)
from app.services.discounts.discount_eligibility_core import evaluate_discount
from app.utils.logger import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def discount_clock() -> datetime:
    return datetime.now(ZoneInfo(DISCOUNT_TIMEZONE))


def _to_definition(discount: DiscountCode) -> DiscountDefinition:
    return DiscountDefinition(
        code=discount.code,
        external_id=discount.external_id,
        discount_type=discount.discount_type,
        discount_percent=discount.discount_percent,
        discount_amount=discount.discount_amount,
        is_universal=discount.is_universal,
        start_date=discount.start_date,
        end_date=discount.end_date,
        rules=tuple(
            ClassRule(class_id=rule.class_id, is_eligible=rule.is_eligible)
            for rule in discount.rules
        ),
    )


# ---------------- FETCH ----------------
async def fetch_discount_definition(
    db: AsyncSession,
    code: str,
) -> Optional[DiscountDefinition]:
    # joinedload keeps the code and its rules in a single statement
    result = await db.execute(
        select(DiscountCode)
        .options(joinedload(DiscountCode.rules))
        .where(
            DiscountCode.code == code,
            DiscountCode.discount_type.in_(INDIVIDUAL_DISCOUNT_TYPES),
        )
    )
    discount = result.unique().scalars().first()
    if discount is None:
        return None
    return _to_definition(discount)


# ---------------- EVALUATE ----------------
async def get_eligible_discount(
    db: AsyncSession,
    code: str,
    class_id: Optional[str] = None,
    *,
    clock: Clock = discount_clock,
) -> DiscountAccepted | DiscountRejected:
    definition = await fetch_discount_definition(db, code)
    result = evaluate_discount(
        definition,
        code=code,
        class_id=class_id,
        now=clock(),
    )

    if isinstance(result, DiscountRejected):
        logger.info(
            "Discount rejected",
            extra={"code": code, "class_id": class_id, "reason": result.reason.value},
        )
    else:
        logger.debug(
            "Discount eligible",
            extra={"code": code, "class_id": class_id, "value": str(result.discount.value)},
        )

    return result
