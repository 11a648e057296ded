from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    Date,
    Boolean,
    Enum,
    ForeignKey,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin
from app.models.enums.discount_type import DiscountType


class DiscountCode(Base, TimestampMixin):
    __tablename__ = "discount_codes"

    id = Column(Integer, primary_key=True)
    external_id = Column(String(36), nullable=False, unique=True)
    code = Column(String(80), nullable=False, unique=True, index=True)
    name = Column(String(120), nullable=True)
    discount_type = Column(Enum(DiscountType), nullable=False, index=True)
    discount_percent = Column(Numeric(5, 2), nullable=True)
    discount_amount = Column(Numeric(10, 2), nullable=True)
    is_universal = Column(Boolean, default=False, nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    note = Column(String(255), nullable=True)

    rules = relationship(
        "DiscountClassRule",
        back_populates="discount_code",
        cascade="all, delete-orphan",
        order_by="DiscountClassRule.id",
    )

    __table_args__ = (
        CheckConstraint(
            "discount_percent IS NULL OR discount_percent >= 0",
            name="ck_discount_code_percent_non_negative",
        ),
        CheckConstraint(
            "discount_amount IS NULL OR discount_amount >= 0",
            name="ck_discount_code_amount_non_negative",
        ),
        CheckConstraint(
            "start_date IS NULL OR end_date IS NULL OR end_date >= start_date",
            name="ck_discount_code_date_range",
        ),
    )

    def __repr__(self):
        return f"<DiscountCode id={self.id} code={self.code} type={self.discount_type}>"


class DiscountClassRule(Base, TimestampMixin):
    __tablename__ = "discount_class_rules"

    id = Column(Integer, primary_key=True)
    discount_code_id = Column(
        Integer,
        ForeignKey("discount_codes.id", ondelete="CASCADE"),
        nullable=False,
    )
    class_id = Column(String(36), nullable=False, index=True)
    is_eligible = Column(Boolean, default=True, nullable=False)

    discount_code = relationship("DiscountCode", back_populates="rules")

    __table_args__ = (
        Index("ix_discount_class_rule_code_class", "discount_code_id", "class_id"),
    )

    def __repr__(self):
        return (
            f"<DiscountClassRule code_id={self.discount_code_id} "
            f"class={self.class_id} eligible={self.is_eligible}>"
        )
