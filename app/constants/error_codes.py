# app/constants/error_codes.py

from enum import Enum


class ErrorCode(str, Enum):
    # Generic
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Store / pool
    POOL_EXHAUSTED = "POOL_EXHAUSTED"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    TRANSACTION_STATE_INVALID = "TRANSACTION_STATE_INVALID"

    # Products
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_SKU_EXISTS = "PRODUCT_SKU_EXISTS"
    PRODUCT_BARCODE_EXISTS = "PRODUCT_BARCODE_EXISTS"
    PRODUCT_FIELD_NOT_UPDATABLE = "PRODUCT_FIELD_NOT_UPDATABLE"

    # Users
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_INACTIVE = "USER_INACTIVE"
