"""Shared-expense splitting: per-member balances and a short settlement plan."""

from receiptsplit.services.errors import DegenerateAmount, InvalidExpense, SettlementError, UnbalancedInput
from receiptsplit.services.settlement import Transaction, simplify_debts
from receiptsplit.services.split import Expense, ExpenseItem, compute_balances

__all__ = [
    "DegenerateAmount",
    "Expense",
    "ExpenseItem",
    "InvalidExpense",
    "SettlementError",
    "Transaction",
    "UnbalancedInput",
    "compute_balances",
    "simplify_debts",
]
