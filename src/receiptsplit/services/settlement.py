"""Greedy settlement of net balances.

The largest remaining debtor pays the largest remaining creditor until one
side runs out. Each step clears at least one member, so a plan never has more
than ``members - 1`` transactions. This is a heuristic: some balance layouts
can be settled with fewer transactions by an exact subset-sum search.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping

from receiptsplit.logging import get_logger
from receiptsplit.services.errors import DegenerateAmount, UnbalancedInput

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Transaction:
    from_member: str
    to_member: str
    amount: int


def check_balanced(balances: Mapping[str, int]) -> None:
    total = 0
    for member, balance in balances.items():
        if isinstance(balance, bool) or not isinstance(balance, int):
            raise DegenerateAmount(balance, member=member)
        total += balance
    if total != 0:
        raise UnbalancedInput(total)


def simplify_debts(balances: Mapping[str, int]) -> List[Transaction]:
    check_balanced(balances)

    remaining = {member: balance for member, balance in balances.items() if balance != 0}
    # sorted() is stable, so equal amounts keep the input order
    debtors = sorted((m for m, b in remaining.items() if b < 0), key=lambda m: remaining[m])
    creditors = sorted((m for m, b in remaining.items() if b > 0), key=lambda m: -remaining[m])

    transactions: list[Transaction] = []
    debtor_iter, creditor_iter = iter(debtors), iter(creditors)
    debtor, creditor = next(debtor_iter, None), next(creditor_iter, None)

    while debtor is not None and creditor is not None:
        amount = min(-remaining[debtor], remaining[creditor])
        transactions.append(Transaction(from_member=debtor, to_member=creditor, amount=amount))
        remaining[debtor] += amount
        remaining[creditor] -= amount

        if remaining[debtor] == 0:
            debtor = next(debtor_iter, None)
        if remaining[creditor] == 0:
            creditor = next(creditor_iter, None)

    logger.debug(
        "settlement_planned",
        debtors=len(debtors),
        creditors=len(creditors),
        transactions=len(transactions),
    )
    return transactions


def replay(transactions: Iterable[Transaction]) -> dict[str, int]:
    """Balances a plan settles: the payer was owing, the receiver was owed."""
    result: dict[str, int] = {}
    for tx in transactions:
        result[tx.from_member] = result.get(tx.from_member, 0) - tx.amount
        result[tx.to_member] = result.get(tx.to_member, 0) + tx.amount
    return result
