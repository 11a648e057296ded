from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from app.models.enums.discount_type import DiscountKind, DiscountType
from app.schemas.discounts.discount_eligibility_schemas import (
    DiscountAccepted,
    DiscountDefinition,
    DiscountRejected,
    EligibleDiscount,
    RejectionReason,
)


def _day_start(day: date, now: datetime) -> datetime:
    """Midnight of ``day`` in the same timezone as ``now``."""
    return datetime.combine(day, time.min, tzinfo=now.tzinfo)


def _reject(reason: RejectionReason, message: str) -> DiscountRejected:
    return DiscountRejected(reason=reason, message=message)


def _build_eligible_discount(definition: DiscountDefinition) -> EligibleDiscount:
    if definition.discount_type == DiscountType.individual_percentage:
        kind = DiscountKind.percentage
        value = (definition.discount_percent or Decimal("0")) / Decimal("-100")
    else:
        kind = DiscountKind.amount
        value = -(definition.discount_amount or Decimal("0"))

    applies_to = []
    excludes = []
    for rule in definition.rules:
        if rule.is_eligible:
            applies_to.append(rule.class_id)
        else:
            excludes.append(rule.class_id)

    return EligibleDiscount(
        code=definition.code,
        external_id=definition.external_id,
        type=kind,
        value=value,
        universal=definition.is_universal,
        applies_to=applies_to,
        excludes=excludes,
    )


def evaluate_discount(
    definition: Optional[DiscountDefinition],
    *,
    code: str,
    class_id: Optional[str],
    now: datetime,
) -> DiscountAccepted | DiscountRejected:
    """
    Decide whether ``definition`` applies to ``class_id`` at ``now``.

    Checks run in order and the first failure wins:
    missing code, start date in the future, end date passed,
    an ineligible rule for the class, no rule and not universal.
    The end date counts as a whole day.
    """
    if definition is None:
        return _reject(
            RejectionReason.invalid_code,
            f"Discount code '{code}' is invalid.",
        )

    rules_for_class = [
        rule for rule in definition.rules
        if class_id is not None and rule.class_id == class_id
    ]

    if definition.start_date and _day_start(definition.start_date, now) > now:
        return _reject(
            RejectionReason.not_started,
            f"Discount code '{code}' is currently ineligible.",
        )

    if definition.end_date and _day_start(definition.end_date, now) + timedelta(days=1) < now:
        return _reject(
            RejectionReason.expired,
            f"Discount '{code}' is no longer eligible.",
        )

    if rules_for_class:
        if not all(rule.is_eligible for rule in rules_for_class):
            return _reject(
                RejectionReason.excluded_for_class,
                f"Discount '{code}' is not eligible for this class.",
            )
        # every rule for this class allows the discount
        return DiscountAccepted(discount=_build_eligible_discount(definition))

    if not definition.is_universal:
        return _reject(
            RejectionReason.not_applicable,
            f"Discount code '{code}' is not applicable.",
        )

    return DiscountAccepted(discount=_build_eligible_discount(definition))
