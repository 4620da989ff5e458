# app/constants/stock_adjustment_type.py

from enum import Enum


class StockAdjustmentType(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    SET = "set"
