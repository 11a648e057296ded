# app/routers/discounts/discount_code_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.enums.discount_type import DiscountType
from app.schemas.discounts.discount_code_schemas import (
    ClassRuleCreate,
    DiscountCodeCreate,
    DiscountCodeListData,
    DiscountCodeOut,
)
from app.schemas.discounts.discount_eligibility_schemas import EligibilityResult
from app.services.discounts.discount_code_service import (
    create_discount_code,
    list_discount_codes,
    get_discount_code,
    add_class_rule,
    remove_class_rule,
)
from app.services.discounts.discount_eligibility_service import get_eligible_discount
from app.utils.response import APIResponse, success_response
from app.utils.logger import get_logger

router = APIRouter(prefix="/discount-codes", tags=["Discount Codes"])
logger = get_logger(__name__)


@router.post("/", response_model=APIResponse[DiscountCodeOut])
async def create_discount_code_api(
    payload: DiscountCodeCreate,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Create discount code", extra={"code": payload.code})
    data = await create_discount_code(db, payload)
    return success_response("Discount code created successfully", data)


@router.get("/", response_model=APIResponse[DiscountCodeListData])
async def list_discount_codes_api(
    db: AsyncSession = Depends(get_db),

    code: str | None = Query(None),
    discount_type: DiscountType | None = Query(None),
    is_universal: bool | None = Query(None),

    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    data = await list_discount_codes(
        db=db,
        code=code,
        discount_type=discount_type,
        is_universal=is_universal,
        page=page,
        page_size=page_size,
    )
    return success_response("Discount codes fetched successfully", data)


@router.get("/{code}", response_model=APIResponse[DiscountCodeOut])
async def get_discount_code_api(
    code: str,
    db: AsyncSession = Depends(get_db),
):
    data = await get_discount_code(db, code)
    return success_response("Discount code fetched successfully", data)


@router.get("/{code}/eligibility", response_model=APIResponse[EligibilityResult])
async def check_discount_eligibility_api(
    code: str,
    class_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    data = await get_eligible_discount(db, code, class_id)
    return success_response("Discount code evaluated", data)


@router.post("/{code}/rules", response_model=APIResponse[DiscountCodeOut])
async def add_class_rule_api(
    code: str,
    payload: ClassRuleCreate,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Add discount class rule", extra={"code": code, "class_id": payload.class_id})
    data = await add_class_rule(db, code, payload)
    return success_response("Discount class rule added successfully", data)


@router.delete("/{code}/rules/{rule_id}", response_model=APIResponse[DiscountCodeOut])
async def remove_class_rule_api(
    code: str,
    rule_id: int,
    db: AsyncSession = Depends(get_db),
):
    logger.info("Remove discount class rule", extra={"code": code, "rule_id": rule_id})
    data = await remove_class_rule(db, code, rule_id)
    return success_response("Discount class rule removed successfully", data)
