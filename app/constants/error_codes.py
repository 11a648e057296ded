# app/constants/error_codes.py
import enum


class ErrorCode(str, enum.Enum):
    # generic
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # discount codes
    DISCOUNT_NOT_FOUND = "DISCOUNT_NOT_FOUND"
    DISCOUNT_CODE_EXISTS = "DISCOUNT_CODE_EXISTS"
    DISCOUNT_INVALID_VALUE = "DISCOUNT_INVALID_VALUE"
    DISCOUNT_INVALID_RANGE = "DISCOUNT_INVALID_RANGE"
    DISCOUNT_RULE_NOT_FOUND = "DISCOUNT_RULE_NOT_FOUND"
