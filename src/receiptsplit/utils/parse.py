from __future__ import annotations

import math
import re
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from receiptsplit.services.errors import DegenerateAmount, InvalidExpense
from receiptsplit.services.split import Expense, ExpenseItem


# 12000, 12,000, 12 000, -500, 15,000원, 3000 KRW, 1200.00
AMOUNT_RE = re.compile(
    r"^(?P<sign>-)?\s*(?P<digits>\d{1,3}(?:[,\s]\d{3})+|\d+)(?:\.(?P<fraction>\d+))?\s*(?P<label>원|KRW|won|\$|€|EUR|USD)?$",
    re.IGNORECASE,
)


def parse_amount(value: Any) -> int:
    """
    Convert an amount from an upstream record to whole currency units.

    Supported inputs:
    - int
    - float or Decimal with no fractional part
    - strings like "12,000", "12 000", "15,000원", "3000 KRW"

    NaN, inf, fractional amounts, bools and empty strings raise DegenerateAmount.
    """
    if isinstance(value, bool):
        raise DegenerateAmount(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise DegenerateAmount(value)
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise DegenerateAmount(value)
        return int(value)
    if isinstance(value, str):
        match = AMOUNT_RE.match(value.strip())
        if not match:
            raise DegenerateAmount(value)
        fraction = match.group("fraction")
        if fraction and fraction.strip("0"):
            raise DegenerateAmount(value)
        amount = int(re.sub(r"[,\s]", "", match.group("digits")))
        return -amount if match.group("sign") else amount
    raise DegenerateAmount(value)


def _parse_spent_on(value: Any, index: int, expense_id: Optional[str]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as exc:
        raise InvalidExpense(
            f"unrecognized date {value!r}",
            expense_index=index,
            expense_id=expense_id,
        ) from exc


def _member_id(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, Mapping, list, tuple, set)):
        return None
    member = str(value).strip()
    return member or None


def _parse_item(raw: Any, index: int, item_index: int, expense_id: Optional[str]) -> ExpenseItem:
    if not isinstance(raw, Mapping):
        raise InvalidExpense(
            "item must be a record",
            expense_index=index,
            item_index=item_index,
            expense_id=expense_id,
        )
    if "price" not in raw:
        raise InvalidExpense("item has no price", expense_index=index, item_index=item_index, expense_id=expense_id)
    try:
        price = parse_amount(raw["price"])
    except DegenerateAmount as exc:
        raise DegenerateAmount(
            exc.value,
            expense_index=index,
            item_index=item_index,
            expense_id=expense_id,
        ) from exc

    raw_participants = raw.get("participants") or []
    if isinstance(raw_participants, (str, Mapping)) or not isinstance(raw_participants, Iterable):
        raise InvalidExpense(
            "participants must be a list of member ids",
            expense_index=index,
            item_index=item_index,
            expense_id=expense_id,
        )

    participants = []
    for raw_member in raw_participants:
        member = _member_id(raw_member)
        if member is None:
            raise InvalidExpense(
                f"invalid participant id {raw_member!r}",
                expense_index=index,
                item_index=item_index,
                expense_id=expense_id,
            )
        participants.append(member)

    return ExpenseItem(
        name=str(raw.get("name") or ""),
        price=price,
        participants=tuple(participants),
    )


def parse_expense_record(raw: Mapping[str, Any], index: int = 0) -> Expense:
    if not isinstance(raw, Mapping):
        raise InvalidExpense("expense must be a record", expense_index=index)

    expense_id = str(raw["id"]) if raw.get("id") is not None else None

    payer = _member_id(raw.get("payer"))
    if payer is None:
        raise InvalidExpense("expense has no payer", expense_index=index, expense_id=expense_id)

    raw_items = raw.get("items")
    if not raw_items or isinstance(raw_items, (str, Mapping)) or not isinstance(raw_items, Iterable):
        raise InvalidExpense("expense must have at least one item", expense_index=index, expense_id=expense_id)

    items = tuple(
        _parse_item(raw_item, index, item_index, expense_id)
        for item_index, raw_item in enumerate(raw_items)
    )

    total = None
    if raw.get("total") is not None:
        try:
            total = parse_amount(raw["total"])
        except DegenerateAmount as exc:
            raise DegenerateAmount(exc.value, expense_index=index, expense_id=expense_id) from exc

    return Expense(
        payer=payer,
        items=items,
        total=total,
        expense_id=expense_id,
        spent_on=_parse_spent_on(raw.get("date"), index, expense_id),
    )


def parse_expense_records(raws: Iterable[Mapping[str, Any]]) -> list[Expense]:
    return [parse_expense_record(raw, index) for index, raw in enumerate(raws)]


def validate_manual_entry(expense: Expense, index: int = 0) -> None:
    """Rules of the manual entry form: every item named, priced and shared."""
    if not expense.items:
        raise InvalidExpense("at least one item is required", expense_index=index, expense_id=expense.expense_id)

    for item_index, item in enumerate(expense.items):
        if not item.name.strip():
            reason = "every item needs a name"
        elif isinstance(item.price, bool) or not isinstance(item.price, int) or item.price <= 0:
            reason = "every item needs a positive price"
        elif not item.participants:
            reason = "select participants for every item"
        else:
            continue
        raise InvalidExpense(reason, expense_index=index, item_index=item_index, expense_id=expense.expense_id)
