"""Domain models package."""

from shiftledger.models.app_config import AppConfig
from shiftledger.models.daily_expense import DailyExpense
from shiftledger.models.daily_expense_schemas import (
    DailyExpenseCreate,
    DailyExpenseRead,
    DailyExpenseUpdate,
)
from shiftledger.models.enums import PaymentMethod, ReconciliationType
from shiftledger.models.operator import Operator
from shiftledger.models.sale import Sale, SaleItem
from shiftledger.models.sale_schemas import SaleCreate, SaleRead, SaleReturnRequest
from shiftledger.models.shift import Shift
from shiftledger.models.shift_schemas import (
    ExpenseSnapshot,
    Reconciliation,
    ReturnDetail,
    SaleSnapshot,
    ShiftPreview,
    ShiftRead,
    ShiftSummary,
)

__all__ = [
    "AppConfig",
    "DailyExpense",
    "DailyExpenseCreate",
    "DailyExpenseRead",
    "DailyExpenseUpdate",
    "ExpenseSnapshot",
    "Operator",
    "PaymentMethod",
    "Reconciliation",
    "ReconciliationType",
    "ReturnDetail",
    "Sale",
    "SaleCreate",
    "SaleItem",
    "SaleRead",
    "SaleReturnRequest",
    "SaleSnapshot",
    "Shift",
    "ShiftPreview",
    "ShiftRead",
    "ShiftSummary",
]
