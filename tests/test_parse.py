from datetime import date
from decimal import Decimal

import pytest

from receiptsplit.services.errors import DegenerateAmount, InvalidExpense
from receiptsplit.services.split import Expense, ExpenseItem, compute_balances
from receiptsplit.utils.parse import parse_amount, parse_expense_record, parse_expense_records, validate_manual_entry


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (12000, 12000),
        (12000.0, 12000),
        (Decimal("1500"), 1500),
        ("12000", 12000),
        ("12,000", 12000),
        ("12 000", 12000),
        ("15,000원", 15000),
        ("3000 KRW", 3000),
        ("1200.00", 1200),
        ("-500", -500),
    ],
)
def test_parse_amount(value, expected):
    assert parse_amount(value) == expected


@pytest.mark.parametrize(
    "value",
    [float("nan"), float("inf"), 10.5, Decimal("NaN"), True, "", "NaN", "abc", "12abc", "1,200.50", "12e3", None, [100]],
)
def test_parse_amount_degenerate(value):
    with pytest.raises(DegenerateAmount):
        parse_amount(value)


def test_parse_expense_record():
    raw = {
        "id": 1,
        "date": "2025-11-02",
        "payer": "Hong",
        "items": [
            {"id": "1-1", "name": "Pork belly", "price": 40000, "participants": ["Hong", "Kim", "Lee"]},
            {"id": "1-2", "name": "Soju", "price": "10,000", "participants": ["Hong", "Kim"]},
        ],
        "total": 50000,
    }

    expense = parse_expense_record(raw)

    assert expense == Expense(
        payer="Hong",
        items=(
            ExpenseItem(name="Pork belly", price=40000, participants=("Hong", "Kim", "Lee")),
            ExpenseItem(name="Soju", price=10000, participants=("Hong", "Kim")),
        ),
        total=50000,
        expense_id="1",
        spent_on=date(2025, 11, 2),
    )


def test_parse_expense_records_feed_aggregator():
    raws = [
        {"payer": "A", "items": [{"name": "Dinner", "price": "50,000", "participants": ["A", "B", "C"]}]},
    ]
    balances = compute_balances(parse_expense_records(raws))
    assert balances == {"A": 33333, "B": -16667, "C": -16666}


def test_parse_expense_record_missing_participants_left_to_aggregator():
    expense = parse_expense_record({"payer": "A", "items": [{"name": "Tip", "price": 100}]})
    assert expense.items[0].participants == ()
    with pytest.raises(InvalidExpense):
        compute_balances([expense])


def test_parse_expense_record_bad_price_location():
    raws = [
        {"payer": "A", "items": [{"name": "ok", "price": 1, "participants": ["A"]}]},
        {"payer": "B", "items": [{"name": "ok", "price": 1, "participants": ["B"]}, {"name": "bad", "price": "NaN", "participants": ["B"]}]},
    ]
    with pytest.raises(DegenerateAmount) as excinfo:
        parse_expense_records(raws)
    assert excinfo.value.expense_index == 1
    assert excinfo.value.item_index == 1


@pytest.mark.parametrize(
    "raw",
    [
        {"items": [{"name": "x", "price": 1, "participants": ["A"]}]},
        {"payer": "A", "items": []},
        {"payer": "A"},
        {"payer": "A", "items": [{"name": "x", "participants": ["A"]}]},
        {"payer": "A", "items": [{"name": "x", "price": 1, "participants": "A"}]},
        {"payer": "A", "date": "yesterday", "items": [{"name": "x", "price": 1, "participants": ["A"]}]},
        {"payer": "  ", "items": [{"name": "x", "price": 1, "participants": ["A"]}]},
        {"payer": ["A"], "items": [{"name": "x", "price": 1, "participants": ["A"]}]},
        {"payer": "A", "items": [None]},
        {"payer": "A", "items": [100]},
        {"payer": "A", "items": [["x", 1, ["A"]]]},
        {"payer": "A", "items": 5},
        {"payer": "A", "items": [{"name": "x", "price": 1, "participants": [None, "A"]}]},
        {"payer": "A", "items": [{"name": "x", "price": 1, "participants": ["A", " "]}]},
        None,
        ["A", 100],
    ],
)
def test_parse_expense_record_invalid(raw):
    with pytest.raises(InvalidExpense):
        parse_expense_record(raw)


def test_validate_manual_entry():
    good = Expense(payer="A", items=[ExpenseItem(name="Lunch", price=9000, participants=["A", "B"])])
    validate_manual_entry(good)

    unnamed = Expense(payer="A", items=[ExpenseItem(name="  ", price=9000, participants=["A"])])
    free = Expense(payer="A", items=[ExpenseItem(name="Lunch", price=0, participants=["A"])])
    unshared = Expense(
        payer="A",
        items=[
            ExpenseItem(name="Lunch", price=9000, participants=["A"]),
            ExpenseItem(name="Dessert", price=3000, participants=[]),
        ],
    )

    for expense, reason in [
        (unnamed, "every item needs a name"),
        (free, "every item needs a positive price"),
        (unshared, "select participants for every item"),
        (Expense(payer="A", items=[]), "at least one item is required"),
    ]:
        with pytest.raises(InvalidExpense) as excinfo:
            validate_manual_entry(expense)
        assert excinfo.value.reason == reason

    with pytest.raises(InvalidExpense) as excinfo:
        validate_manual_entry(unshared)
    assert excinfo.value.item_index == 1


def test_parse_expense_record_rejects_null_participant():
    raw = {"id": "r7", "payer": "A", "items": [{"name": "x", "price": 100, "participants": [None, "A"]}]}
    with pytest.raises(InvalidExpense) as excinfo:
        parse_expense_record(raw, index=3)
    assert excinfo.value.expense_index == 3
    assert excinfo.value.item_index == 0
    assert excinfo.value.expense_id == "r7"


def test_parse_expense_record_rejects_non_record_item():
    with pytest.raises(InvalidExpense) as excinfo:
        parse_expense_record({"payer": "A", "items": [{"name": "ok", "price": 1, "participants": ["A"]}, None]})
    assert excinfo.value.item_index == 1


def test_parse_expense_record_strips_member_ids():
    expense = parse_expense_record({"payer": " A ", "items": [{"name": "x", "price": 2, "participants": [" B", 7]}]})
    assert expense.payer == "A"
    assert expense.items[0].participants == ("B", "7")


def test_degenerate_price_keeps_expense_id():
    raw = {"id": 42, "payer": "A", "items": [{"name": "x", "price": "12abc", "participants": ["A"]}]}
    with pytest.raises(DegenerateAmount) as excinfo:
        parse_expense_record(raw)
    assert excinfo.value.expense_id == "42"
    assert "id=42" in str(excinfo.value)
