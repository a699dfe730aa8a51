from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from receiptsplit.config import EmptyParticipantsPolicy
from receiptsplit.logging import get_logger
from receiptsplit.services.errors import DegenerateAmount, InvalidExpense

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ExpenseItem:
    name: str
    price: int
    participants: Sequence[str]


@dataclass(frozen=True, slots=True)
class Expense:
    payer: str
    items: Sequence[ExpenseItem]
    total: Optional[int] = None
    expense_id: Optional[str] = None
    spent_on: Optional[date] = None

    @property
    def items_total(self) -> int:
        return sum(item.price for item in self.items)

    @property
    def declared_total(self) -> int:
        """Total shown to users. Never used for balance math."""
        return self.total if self.total is not None else self.items_total


def _is_integer_amount(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def split_amount(price: int, participants: Sequence[str]) -> dict[str, int]:
    """Split ``price`` between ``participants`` without losing a unit.

    Everyone gets ``price // n``; the first ``price % n`` participants in list
    order get one extra unit. Repeated ids count once.
    """
    if not _is_integer_amount(price):
        raise DegenerateAmount(price)
    if price < 0:
        raise InvalidExpense("price must be non-negative")

    consumers = list(dict.fromkeys(participants))
    if not consumers:
        raise InvalidExpense("participants must not be empty")

    base_share, remainder = divmod(price, len(consumers))
    return {
        consumer: base_share + (1 if idx < remainder else 0)
        for idx, consumer in enumerate(consumers)
    }


def validate_expense(
    expense: Expense,
    index: int = 0,
    policy: EmptyParticipantsPolicy = EmptyParticipantsPolicy.STRICT,
) -> None:
    if expense.payer is None or expense.payer == "":
        raise InvalidExpense("expense has no payer", expense_index=index, expense_id=expense.expense_id)
    if not expense.items:
        raise InvalidExpense("expense must have at least one item", expense_index=index, expense_id=expense.expense_id)

    for item_index, item in enumerate(expense.items):
        if not _is_integer_amount(item.price):
            raise DegenerateAmount(
                item.price,
                expense_index=index,
                item_index=item_index,
                expense_id=expense.expense_id,
            )
        if item.price < 0:
            raise InvalidExpense(
                f"item {item.name!r} has a negative price",
                expense_index=index,
                item_index=item_index,
                expense_id=expense.expense_id,
            )
        if not item.participants and policy == EmptyParticipantsPolicy.STRICT:
            raise InvalidExpense(
                f"item {item.name!r} has no participants",
                expense_index=index,
                item_index=item_index,
                expense_id=expense.expense_id,
            )


def _item_participants(expense: Expense, item: ExpenseItem, index: int, item_index: int) -> Sequence[str]:
    if item.participants:
        return item.participants
    logger.warning(
        "empty_participants_charged_to_payer",
        expense_index=index,
        item_index=item_index,
        expense_id=expense.expense_id,
        payer=expense.payer,
    )
    return [expense.payer]


def merge_shares(shares: Iterable[Mapping[str, int]]) -> dict[str, int]:
    result: dict[str, int] = {}
    for share in shares:
        for member, amount in share.items():
            result[member] = result.get(member, 0) + amount
    return result


def item_shares(
    expense: Expense,
    policy: EmptyParticipantsPolicy = EmptyParticipantsPolicy.STRICT,
    index: int = 0,
) -> dict[str, int]:
    """How much each member owes for one expense, summed over its items."""
    validate_expense(expense, index, policy)
    per_item = []
    for item_index, item in enumerate(expense.items):
        participants = _item_participants(expense, item, index, item_index)
        per_item.append(split_amount(item.price, participants))
    return merge_shares(per_item)


def compute_balances(
    expenses: Sequence[Expense],
    policy: EmptyParticipantsPolicy = EmptyParticipantsPolicy.STRICT,
) -> dict[str, int]:
    """Fold expenses into net balances.

    Positive balance: the member is owed money. Negative: the member owes.
    Every expense is validated before any of them is applied, so a bad record
    never leaves a partial result behind.
    """
    for index, expense in enumerate(expenses):
        validate_expense(expense, index, policy)

    balances: dict[str, int] = {}
    for index, expense in enumerate(expenses):
        balances.setdefault(expense.payer, 0)
        shares = item_shares(expense, policy, index)
        for member, share in shares.items():
            balances[member] = balances.get(member, 0) - share
        balances[expense.payer] += expense.items_total

        if expense.total is not None and expense.total != expense.items_total:
            logger.warning(
                "declared_total_mismatch",
                expense_index=index,
                expense_id=expense.expense_id,
                declared=expense.total,
                items_total=expense.items_total,
            )

    logger.debug("balances_computed", expenses=len(expenses), members=len(balances))
    return balances
