# app/core/exceptions.py

from fastapi import HTTPException
from app.constants.error_codes import ErrorCode
from app.utils.response import error_response


class AppException(HTTPException):
    """Business error raised by services and rendered by app_exception_handler."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: ErrorCode,
        details: dict | None = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details

    def to_content(self) -> dict:
        return error_response(self.detail, self.error_code, self.details)
