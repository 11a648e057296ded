from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.models.enums.discount_type import DiscountType
from app.schemas.discounts.discount_code_schemas import ClassRuleCreate, DiscountCodeCreate
from app.services.discounts import discount_code_service
from app.services.discounts.discount_code_service import (
    add_class_rule,
    create_discount_code,
    get_discount_code,
    list_discount_codes,
    remove_class_rule,
)


def _payload(**overrides) -> DiscountCodeCreate:
    fields = {
        "code": "SPRING10",
        "external_id": "ext-spring",
        "discount_type": DiscountType.individual_percentage,
        "discount_percent": Decimal("10"),
        "is_universal": True,
    }
    fields.update(overrides)
    return DiscountCodeCreate(**fields)


async def test_create_discount_code_with_rules(db):
    out = await create_discount_code(
        db,
        _payload(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
            rules=[ClassRuleCreate(class_id="A"), ClassRuleCreate(class_id="B", is_eligible=False)],
        ),
    )

    assert out.id is not None
    assert out.code == "SPRING10"
    assert out.discount_type == DiscountType.individual_percentage
    assert [(r.class_id, r.is_eligible) for r in out.rules] == [("A", True), ("B", False)]
    assert out.created_at is not None


@pytest.mark.parametrize(
    "overrides",
    [
        {"discount_percent": Decimal("0")},
        {"discount_percent": Decimal("100.5")},
        {"discount_percent": None},
        {"discount_type": DiscountType.individual_amount, "discount_amount": None},
        {"discount_type": DiscountType.individual_amount, "discount_amount": Decimal("-5")},
    ],
)
async def test_create_rejects_invalid_value(db, overrides):
    with pytest.raises(AppException) as exc:
        await create_discount_code(db, _payload(**overrides))

    assert exc.value.status_code == 400
    assert exc.value.error_code == ErrorCode.DISCOUNT_INVALID_VALUE


async def test_create_rejects_inverted_date_range(db):
    with pytest.raises(AppException) as exc:
        await create_discount_code(
            db,
            _payload(start_date=date(2024, 5, 1), end_date=date(2024, 4, 30)),
        )

    assert exc.value.error_code == ErrorCode.DISCOUNT_INVALID_RANGE


async def test_single_day_discount_is_allowed(db):
    out = await create_discount_code(
        db,
        _payload(start_date=date(2024, 5, 1), end_date=date(2024, 5, 1)),
    )

    assert out.start_date == out.end_date


async def test_create_rejects_duplicate_code(db):
    await create_discount_code(db, _payload())

    with pytest.raises(AppException) as exc:
        await create_discount_code(db, _payload(external_id="ext-other"))

    assert exc.value.status_code == 409
    assert exc.value.error_code == ErrorCode.DISCOUNT_CODE_EXISTS


async def test_create_rejects_duplicate_external_id(db):
    await create_discount_code(db, _payload())

    with pytest.raises(AppException) as exc:
        await create_discount_code(db, _payload(code="OTHER"))

    assert exc.value.error_code == ErrorCode.DISCOUNT_CODE_EXISTS


async def test_get_missing_discount_code(db):
    with pytest.raises(AppException) as exc:
        await get_discount_code(db, "MISSING")

    assert exc.value.status_code == 404
    assert exc.value.error_code == ErrorCode.DISCOUNT_NOT_FOUND


async def test_list_discount_codes_filters_and_pages(db, make_discount_code):
    await make_discount_code("ALPHA", universal=True)
    await make_discount_code("BETA", universal=False)
    await make_discount_code(
        "GAMMA",
        discount_type=DiscountType.bulk_amount,
        percent=None,
        amount=Decimal("100"),
    )

    everything = await list_discount_codes(db=db)
    restricted = await list_discount_codes(db=db, is_universal=False)
    bulk = await list_discount_codes(db=db, discount_type=DiscountType.bulk_amount)
    second_page = await list_discount_codes(db=db, page=2, page_size=2)

    assert everything.total == 3
    assert [d.code for d in everything.items] == ["ALPHA", "BETA", "GAMMA"]
    assert [d.code for d in restricted.items] == ["BETA"]
    assert [d.code for d in bulk.items] == ["GAMMA"]
    assert second_page.total == 3
    assert [d.code for d in second_page.items] == ["GAMMA"]


async def test_add_and_remove_class_rules(db, make_discount_code):
    await make_discount_code("RULES", rules=[("A", True)])

    out = await add_class_rule(db, "RULES", ClassRuleCreate(class_id="B", is_eligible=False))
    assert [(r.class_id, r.is_eligible) for r in out.rules] == [("A", True), ("B", False)]

    # a second rule for the same class is kept
    out = await add_class_rule(db, "RULES", ClassRuleCreate(class_id="B"))
    assert len(out.rules) == 3

    rule_id = out.rules[0].id
    out = await remove_class_rule(db, "RULES", rule_id)
    assert [r.class_id for r in out.rules] == ["B", "B"]


async def test_remove_rule_of_another_code(db, make_discount_code):
    await make_discount_code("ONE", rules=[("A", True)])
    await make_discount_code("TWO")
    one = await get_discount_code(db, "ONE")

    with pytest.raises(AppException) as exc:
        await remove_class_rule(db, "TWO", one.rules[0].id)

    assert exc.value.error_code == ErrorCode.DISCOUNT_RULE_NOT_FOUND


@pytest.mark.parametrize(
    "overrides",
    [
        {
            "discount_type": DiscountType.individual_amount,
            "discount_amount": Decimal("10"),
            "discount_percent": Decimal("-5"),
        },
        {"discount_percent": Decimal("10"), "discount_amount": Decimal("-1")},
    ],
)
async def test_create_rejects_negative_unused_value(db, overrides):
    with pytest.raises(AppException) as exc:
        await create_discount_code(db, _payload(**overrides))

    assert exc.value.status_code == 400
    assert exc.value.error_code == ErrorCode.DISCOUNT_INVALID_VALUE


async def test_constraint_violation_is_not_reported_as_duplicate(db, monkeypatch):
    monkeypatch.setattr(discount_code_service, "_validate_discount_value", lambda *args: None)

    with pytest.raises(IntegrityError):
        await create_discount_code(db, _payload(discount_percent=Decimal("-5")))


async def test_list_filter_treats_wildcards_literally(db, make_discount_code):
    await make_discount_code("A_1")
    await make_discount_code("AB1")
    await make_discount_code("50%OFF")
    await make_discount_code("500FF")

    underscore = await list_discount_codes(db=db, code="A_1")
    percent = await list_discount_codes(db=db, code="0%")

    assert [d.code for d in underscore.items] == ["A_1"]
    assert [d.code for d in percent.items] == ["50%OFF"]


def test_code_must_be_a_single_path_segment():
    with pytest.raises(ValidationError):
        _payload(code="SPRING/10")
    with pytest.raises(ValidationError):
        _payload(code="SPRING 10")
