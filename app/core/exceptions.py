from fastapi import HTTPException
from app.constants.error_codes import ErrorCode


class AppException(HTTPException):
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


class NotFoundError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.NOT_FOUND, details: dict | None = None):
        super().__init__(404, message, error_code, details)


class ConflictError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.CONFLICT, details: dict | None = None):
        super().__init__(409, message, error_code, details)


class ValidationFailedError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.VALIDATION_ERROR, details: dict | None = None):
        super().__init__(400, message, error_code, details)


class PoolExhaustedError(AppException):
    def __init__(self, message: str = "No database connection available", details: dict | None = None):
        super().__init__(503, message, ErrorCode.POOL_EXHAUSTED, details)


class StoreUnavailableError(AppException):
    def __init__(self, message: str = "Database is unavailable", details: dict | None = None):
        super().__init__(503, message, ErrorCode.STORE_UNAVAILABLE, details)


class TransactionStateError(AppException):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(500, message, ErrorCode.TRANSACTION_STATE_INVALID, details)


class UnauthorizedError(AppException):
    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.UNAUTHORIZED, details: dict | None = None):
        super().__init__(401, message, error_code, details)
