# app/constants/user_role.py

from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    CASHIER = "cashier"
    INVENTORY_CLERK = "inventory_clerk"
    ACCOUNTANT = "accountant"


STOCK_WRITE_ROLES = [UserRole.ADMIN, UserRole.MANAGER, UserRole.INVENTORY_CLERK]
PRODUCT_DELETE_ROLES = [UserRole.ADMIN, UserRole.MANAGER]
