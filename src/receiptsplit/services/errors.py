from __future__ import annotations

from typing import Optional


class SettlementError(ValueError):
    pass


class InvalidExpense(SettlementError):
    def __init__(
        self,
        reason: str,
        *,
        expense_index: Optional[int] = None,
        item_index: Optional[int] = None,
        expense_id: Optional[str] = None,
    ) -> None:
        self.reason = reason
        self.expense_index = expense_index
        self.item_index = item_index
        self.expense_id = expense_id
        super().__init__(_describe(reason, expense_index, item_index, expense_id))


class DegenerateAmount(SettlementError):
    def __init__(
        self,
        value: object,
        *,
        expense_index: Optional[int] = None,
        item_index: Optional[int] = None,
        expense_id: Optional[str] = None,
        member: Optional[str] = None,
    ) -> None:
        self.value = value
        self.expense_index = expense_index
        self.item_index = item_index
        self.expense_id = expense_id
        self.member = member
        reason = f"amount {value!r} is not a finite integer"
        if member is not None:
            reason = f"{reason} (member {member!r})"
        super().__init__(_describe(reason, expense_index, item_index, expense_id))


class UnbalancedInput(SettlementError):
    def __init__(self, total: int) -> None:
        self.total = total
        super().__init__(f"balances must sum to zero, got {total}")


def _describe(
    reason: str,
    expense_index: Optional[int],
    item_index: Optional[int],
    expense_id: Optional[str],
) -> str:
    where = []
    if expense_index is not None:
        where.append(f"expense #{expense_index}")
    if expense_id is not None:
        where.append(f"id={expense_id}")
    if item_index is not None:
        where.append(f"item #{item_index}")
    if not where:
        return reason
    return f"{', '.join(where)}: {reason}"
