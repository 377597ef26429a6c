"""Tests for the trigger catalog, wire models and minor unit conversion."""
from decimal import Decimal

import pytest
from approvals.rules.ast import Conjunction, Guard, Leaf, Opaque, parse_element
from approvals.rules.catalog import TRIGGER_CATALOG, TriggerKey, TriggerKind, summarize, trigger_label
from approvals.rules.currency import from_minor_units, to_minor_units
from approvals.rules.errors import ParseError
from approvals.rules.script import REQUEST_APPROVAL_BY_USERS, ScriptAssignment


def leaf(operator, name, right_operand):
    return {"operator": operator, "left_operand": {"name": name}, "right_operand": right_operand}


def test_catalog_covers_every_trigger_key():
    assert set(TRIGGER_CATALOG) == set(TriggerKey)
    assert TRIGGER_CATALOG[TriggerKey.AMOUNT].kind is TriggerKind.AMOUNT_RANGE
    assert TRIGGER_CATALOG[TriggerKey.TAGS].field == "invoice.tags.id"


def test_trigger_labels():
    assert trigger_label("amount") == "Amount"
    assert trigger_label(TriggerKey.WAS_CREATED_BY_USER_ID) == "Created by user"
    assert trigger_label("counterpart_id") == "Counterparts"
    assert trigger_label("tags") == "Tags"


def test_summarize_lists_unique_labels_in_order():
    """Test the summary keeps first appearance order and skips unknown fields."""
    conjunction = Conjunction.from_wire({
        "all": [
            "{event_name == 'submitted_for_approval'}",
            leaf(">=", "invoice.amount", 1),
            leaf("<=", "invoice.amount", 2),
            leaf("==", "invoice.status", "draft"),
            leaf("in", "invoice.tags", ["t-1"]),
            leaf("==", "invoice.currency", "EUR"),
            leaf("in", "invoice.was_created_by_user_id", ["u-1"]),
        ]
    })

    assert summarize(conjunction) == ["Amount", "Tags", "Currency", "Created by user"]


def test_parse_element_variants():
    assert parse_element("{guard}") == Guard(literal="{guard}")
    assert isinstance(parse_element(leaf("in", "invoice.tags.id", ["t-1"])), Leaf)
    assert isinstance(parse_element({"operator": "in"}), Opaque)
    assert isinstance(parse_element({"operator": 1, "left_operand": {"name": "x"}, "right_operand": 1}), Opaque)
    assert isinstance(parse_element(None), Opaque)


def test_conjunction_keeps_unknown_condition_keys():
    """Test extra keys on a condition survive a parse and re-serialize."""
    raw = {**leaf("==", "invoice.status", "draft"), "comment": "kept"}

    assert Conjunction.from_wire({"all": [raw]}).to_wire() == {"all": [raw]}


def test_conjunction_from_json():
    conjunction = Conjunction.from_json(b'{"all": ["g", {"operator": "in", "left_operand": {"name": "invoice.tags.id"}, "right_operand": ["t"]}]}')

    assert len(conjunction.elements) == 2
    assert conjunction.leaves[0].field == "invoice.tags.id"


def test_conjunction_from_invalid_json():
    with pytest.raises(ParseError):
        Conjunction.from_json(b"{all: ")


@pytest.mark.parametrize("value,currency,minor", [
    ("12.50", "EUR", 1250),
    (Decimal("0.005"), "USD", 1),
    (3, "JPY", 3),
    ("1.234", "KWD", 1234),
])
def test_to_minor_units(value, currency, minor):
    assert to_minor_units(value, currency) == minor


def test_from_minor_units():
    assert from_minor_units(1250, "EUR") == Decimal("12.5")
    assert from_minor_units(500, "JPY") == Decimal("500")


def test_to_minor_units_rejects_text():
    with pytest.raises(ParseError):
        to_minor_units("ten", "EUR")


def test_script_assignment_from_wire():
    script = ScriptAssignment.from_wire([
        {"call": "Other.call", "params": {}},
        {"call": REQUEST_APPROVAL_BY_USERS, "params": {"user_ids": ["u-1"], "required_approval_count": 2}},
    ])

    assert script == ScriptAssignment(user_ids=["u-1"], required_approval_count=2)
    assert ScriptAssignment.from_wire(None) is None
    assert ScriptAssignment.from_wire([{"call": "Other.call"}]) is None
