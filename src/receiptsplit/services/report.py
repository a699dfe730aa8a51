from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence

from receiptsplit.config import EmptyParticipantsPolicy, get_settings
from receiptsplit.logging import get_logger
from receiptsplit.services.settlement import Transaction, simplify_debts
from receiptsplit.services.split import Expense, compute_balances

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Group:
    group_id: str
    name: str
    members: Sequence[str] = ()


@dataclass(slots=True)
class SettlementReport:
    balances: dict[str, int]
    transactions: list[Transaction]
    total_spent: int
    group: Optional[Group] = None
    names: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_settled(self) -> bool:
        return not self.transactions


def total_spent(expenses: Sequence[Expense]) -> int:
    return sum(expense.declared_total for expense in expenses)


def build_report(
    expenses: Sequence[Expense],
    group: Optional[Group] = None,
    policy: Optional[EmptyParticipantsPolicy] = None,
    names: Optional[Mapping[str, str]] = None,
) -> SettlementReport:
    if policy is None:
        policy = get_settings().empty_participants_policy

    computed = compute_balances(expenses, policy)

    balances: dict[str, int] = {}
    if group is not None:
        for member in group.members:
            balances[member] = 0
    for member, balance in computed.items():
        balances[member] = balances.get(member, 0) + balance

    transactions = simplify_debts(balances)
    logger.info(
        "settlement_report_built",
        group_id=group.group_id if group else None,
        expenses=len(expenses),
        members=len(balances),
        transactions=len(transactions),
    )
    return SettlementReport(
        balances=balances,
        transactions=transactions,
        total_spent=total_spent(expenses),
        group=group,
        names=dict(names or {}),
    )


def display_name(member_id: str, names: Optional[Mapping[str, str]] = None) -> str:
    clean_id = (member_id or "").strip()
    if not clean_id:
        return "Unknown"
    name = ((names or {}).get(clean_id) or "").strip()
    if name:
        return name
    return f"User {clean_id}"


def format_amount(amount: int, currency: Optional[str] = None) -> str:
    if currency is None:
        currency = get_settings().currency_label
    return f"{amount:,}{currency}"


def format_balance_line(
    member_id: str,
    balance: int,
    names: Optional[Mapping[str, str]] = None,
    currency: Optional[str] = None,
) -> str:
    label = display_name(member_id, names)
    if balance > 0:
        return f"• {label}: receives {format_amount(balance, currency)}"
    if balance < 0:
        return f"• {label}: pays {format_amount(-balance, currency)}"
    return f"• {label}: settled"


def format_transaction(
    tx: Transaction,
    names: Optional[Mapping[str, str]] = None,
    currency: Optional[str] = None,
) -> str:
    sender = display_name(tx.from_member, names)
    receiver = display_name(tx.to_member, names)
    return f"• {sender} → {receiver}: {format_amount(tx.amount, currency)}"


def format_report(report: SettlementReport, currency: Optional[str] = None) -> str:
    title = f"{report.group.name} - settlement" if report.group else "Settlement"
    lines = [title, f"Total spent: {format_amount(report.total_spent, currency)}", "", "Balances:"]
    if not report.balances:
        lines.append("• no balances yet")
    for member_id, balance in report.balances.items():
        lines.append(format_balance_line(member_id, balance, report.names, currency))

    lines.extend(["", "Transfers:"])
    if report.is_settled:
        lines.append("• All settled, nobody owes anything")
    for tx in report.transactions:
        lines.append(format_transaction(tx, report.names, currency))
    return "\n".join(lines)
