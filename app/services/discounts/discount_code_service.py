# app/services/discounts/discount_code_service.py

from decimal import Decimal
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.discounts.discount_code_models import DiscountCode, DiscountClassRule
from app.models.enums.discount_type import DiscountType
from app.schemas.discounts.discount_code_schemas import (
    ClassRuleCreate,
    ClassRuleOut,
    DiscountCodeCreate,
    DiscountCodeListData,
    DiscountCodeOut,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

PERCENTAGE_TYPES = {DiscountType.individual_percentage, DiscountType.bulk_percentage}


# ---------------- VALIDATION ----------------
def _validate_discount_value(
    discount_type: DiscountType,
    percent: Optional[Decimal],
    amount: Optional[Decimal],
):
    if (percent is not None and percent < 0) or (amount is not None and amount < 0):
        raise AppException(
            400,
            "Discount values cannot be negative",
            ErrorCode.DISCOUNT_INVALID_VALUE,
        )

    if discount_type in PERCENTAGE_TYPES:
        if percent is None or percent <= 0 or percent > 100:
            raise AppException(
                400,
                "Invalid percentage discount",
                ErrorCode.DISCOUNT_INVALID_VALUE,
            )
    elif amount is None or amount <= 0:
        raise AppException(
            400,
            "Invalid amount discount",
            ErrorCode.DISCOUNT_INVALID_VALUE,
        )


def _validate_date_range(payload: DiscountCodeCreate):
    if payload.start_date and payload.end_date and payload.end_date < payload.start_date:
        raise AppException(
            400,
            "Invalid date range",
            ErrorCode.DISCOUNT_INVALID_RANGE,
        )


def _map_discount_code(discount: DiscountCode) -> DiscountCodeOut:
    return DiscountCodeOut(
        id=discount.id,
        external_id=discount.external_id,
        code=discount.code,
        name=discount.name,
        discount_type=discount.discount_type,
        discount_percent=discount.discount_percent,
        discount_amount=discount.discount_amount,
        is_universal=discount.is_universal,
        start_date=discount.start_date,
        end_date=discount.end_date,
        note=discount.note,
        rules=[ClassRuleOut.model_validate(rule) for rule in discount.rules],
        created_at=discount.created_at,
        updated_at=discount.updated_at,
    )


async def _load_discount_code(db: AsyncSession, code: str) -> DiscountCode:
    result = await db.execute(
        select(DiscountCode)
        .options(selectinload(DiscountCode.rules))
        .where(DiscountCode.code == code)
        .execution_options(populate_existing=True)
    )
    discount = result.scalars().first()
    if not discount:
        raise AppException(404, "Discount code not found", ErrorCode.DISCOUNT_NOT_FOUND)
    return discount


# ---------------- CREATE ----------------
async def create_discount_code(db: AsyncSession, payload: DiscountCodeCreate) -> DiscountCodeOut:
    _validate_discount_value(
        payload.discount_type,
        payload.discount_percent,
        payload.discount_amount,
    )
    _validate_date_range(payload)

    exists = await db.scalar(
        select(DiscountCode.id).where(
            (DiscountCode.code == payload.code)
            | (DiscountCode.external_id == payload.external_id)
        )
    )
    if exists:
        raise AppException(
            409,
            "Discount code already exists",
            ErrorCode.DISCOUNT_CODE_EXISTS,
        )

    discount = DiscountCode(
        **payload.model_dump(exclude={"rules"}),
        rules=[
            DiscountClassRule(class_id=rule.class_id, is_eligible=rule.is_eligible)
            for rule in payload.rules
        ],
    )
    db.add(discount)
    await db.commit()

    logger.info("Discount code created", extra={"code": discount.code})
    return _map_discount_code(await _load_discount_code(db, discount.code))


# ---------------- GET ----------------
async def get_discount_code(db: AsyncSession, code: str) -> DiscountCodeOut:
    return _map_discount_code(await _load_discount_code(db, code))


# ---------------- LIST ----------------
async def list_discount_codes(
    *,
    db: AsyncSession,
    code: Optional[str] = None,
    discount_type: Optional[DiscountType] = None,
    is_universal: Optional[bool] = None,
    page: int = 1,
    page_size: int = 20,
) -> DiscountCodeListData:
    query = select(DiscountCode)

    if code:
        query = query.where(DiscountCode.code.icontains(code, autoescape=True))
    if discount_type:
        query = query.where(DiscountCode.discount_type == discount_type)
    if is_universal is not None:
        query = query.where(DiscountCode.is_universal == is_universal)

    total = await db.scalar(select(func.count()).select_from(query.subquery()))

    result = await db.execute(
        query.options(selectinload(DiscountCode.rules))
        .order_by(DiscountCode.code)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    return DiscountCodeListData(
        total=total or 0,
        items=[_map_discount_code(d) for d in result.scalars().all()],
    )


# ---------------- RULES ----------------
async def add_class_rule(
    db: AsyncSession,
    code: str,
    payload: ClassRuleCreate,
) -> DiscountCodeOut:
    discount = await _load_discount_code(db, code)

    discount.rules.append(
        DiscountClassRule(class_id=payload.class_id, is_eligible=payload.is_eligible)
    )
    await db.commit()

    logger.info(
        "Discount class rule added",
        extra={"code": code, "class_id": payload.class_id, "eligible": payload.is_eligible},
    )
    return _map_discount_code(await _load_discount_code(db, code))


async def remove_class_rule(
    db: AsyncSession,
    code: str,
    rule_id: int,
) -> DiscountCodeOut:
    discount = await _load_discount_code(db, code)

    rule = next((r for r in discount.rules if r.id == rule_id), None)
    if not rule:
        raise AppException(
            404,
            "Discount class rule not found",
            ErrorCode.DISCOUNT_RULE_NOT_FOUND,
        )

    # delete-orphan cascade removes the row
    discount.rules.remove(rule)
    await db.commit()

    logger.info("Discount class rule removed", extra={"code": code, "rule_id": rule_id})
    return _map_discount_code(await _load_discount_code(db, code))
