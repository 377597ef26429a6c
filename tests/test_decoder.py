"""Tests for decoding trigger conjunctions into trigger form state."""
import pytest
from approvals.rules.ast import Guard, Leaf, Opaque
from approvals.rules.decoder import coerce_minor_units, decode, decode_conjunction
from approvals.rules.errors import ParseError
from approvals.rules.triggers import AmountTrigger, Triggers

GUARD = "{event_name == 'submitted_for_approval'}"


def leaf(operator, name, right_operand):
    return {"operator": operator, "left_operand": {"name": name}, "right_operand": right_operand}


def test_decode_id_set_triggers():
    """Test counterpart, creator and tag conditions decode to id lists."""
    ast = {
        "all": [
            GUARD,
            leaf("in", "invoice.counterpart_id", ["c-1", "c-2"]),
            leaf("in", "invoice.was_created_by_user_id", ["u-1"]),
            leaf("in", "invoice.tags.id", ["t-1"]),
        ]
    }

    triggers = decode(ast)

    assert triggers.counterpart_id == ["c-1", "c-2"]
    assert triggers.was_created_by_user_id == ["u-1"]
    assert triggers.tags == ["t-1"]
    assert triggers.amount is None


def test_decode_amount_range():
    """Test two amount bounds and a currency decode into one amount trigger."""
    ast = {
        "all": [
            GUARD,
            leaf(">=", "invoice.amount", 1000),
            leaf("<=", "invoice.amount", 5000),
            leaf("==", "invoice.currency", "EUR"),
        ]
    }

    triggers = decode(ast)

    assert triggers.amount == AmountTrigger(currency="EUR", value=[(">=", 1000), ("<=", 5000)])
    assert triggers.amount.is_range


def test_decode_keeps_amount_bound_order():
    """Test amount bounds keep the order they were found in."""
    ast = {
        "all": [
            leaf("<=", "invoice.amount", 5000),
            leaf(">=", "invoice.amount", 1000),
            leaf("==", "invoice.currency", "EUR"),
        ]
    }

    assert decode(ast).amount.value == [("<=", 5000), (">=", 1000)]


def test_decode_currency_before_amount():
    """Test the currency leaf may come before or after the amount leaf."""
    currency_first = {
        "all": [GUARD, leaf("==", "invoice.currency", "USD"), leaf(">", "invoice.amount", 200)]
    }
    amount_first = {
        "all": [GUARD, leaf(">", "invoice.amount", 200), leaf("==", "invoice.currency", "USD")]
    }

    assert decode(currency_first) == decode(amount_first)
    assert decode(currency_first).amount == AmountTrigger(currency="USD", value=[(">", 200)])


def test_decode_amount_without_currency_uses_default():
    """Test an amount bound without a currency leaf gets the default currency."""
    triggers = decode({"all": [leaf("<", "invoice.amount", 300)]})
    assert triggers.amount.currency == "EUR"

    triggers = decode({"all": [leaf("<", "invoice.amount", 300)]}, default_currency="GBP")
    assert triggers.amount.currency == "GBP"


def test_decode_coerces_numeric_strings():
    """Test string amounts are read as integer minor units."""
    triggers = decode({"all": [leaf(">", "invoice.amount", " 1500 "), leaf("==", "invoice.currency", "EUR")]})
    assert triggers.amount.value == [(">", 1500)]


@pytest.mark.parametrize("value", ["12.5", "abc", "", None, True, [100], 12.5])
def test_decode_malformed_amount_raises(value):
    """Test non-integer amounts raise ParseError instead of defaulting."""
    ast = {"all": [leaf(">", "invoice.amount", value), leaf("==", "invoice.currency", "EUR")]}

    with pytest.raises(ParseError) as exc_info:
        decode(ast)

    assert exc_info.value.field == "invoice.amount"
    assert "invoice.amount" in str(exc_info.value)


def test_coerce_minor_units_accepts_integral_float():
    assert coerce_minor_units(1200.0) == 1200
    assert coerce_minor_units(-5) == -5


def test_decode_drops_unknown_fields():
    """Test unknown fields never raise and leave no trigger behind."""
    ast = {
        "all": [
            GUARD,
            leaf("==", "invoice.status", "draft"),
            leaf("in", "invoice.project_id", ["p-1"]),
        ]
    }

    assert decode(ast) == Triggers()


def test_decode_skips_elements_that_are_not_conditions():
    """Test literals and incomplete objects are skipped."""
    ast = {
        "all": [
            GUARD,
            42,
            {"operator": "in", "left_operand": {"name": "invoice.tags.id"}},
            {"operator": "in", "left_operand": "invoice.tags.id", "right_operand": ["t-1"]},
            leaf("in", "invoice.tags.id", ["t-2"]),
        ]
    }

    assert decode(ast) == Triggers(tags=["t-2"])


def test_decode_casts_ids_to_strings():
    triggers = decode({"all": [leaf("in", "invoice.counterpart_id", [1, 2])]})
    assert triggers.counterpart_id == ["1", "2"]


def test_decode_known_field_with_unsupported_operator():
    """Test a known field with an operator the form does not edit is not decoded."""
    decoded = decode_conjunction({"all": [leaf("not_in", "invoice.counterpart_id", ["c-1"])]})

    assert decoded.triggers.counterpart_id is None
    assert len(decoded.passthrough) == 1


def test_decode_conjunction_collects_passthrough():
    """Test unconsumed elements are returned in order, minus the fixed guard."""
    unknown = leaf("==", "invoice.status", "draft")
    ast = {
        "all": [
            GUARD,
            unknown,
            "{other_guard}",
            leaf("in", "invoice.tags.id", ["t-1"]),
            7,
        ]
    }

    decoded = decode_conjunction(ast, guard=GUARD)

    assert decoded.triggers == Triggers(tags=["t-1"])
    assert [type(e) for e in decoded.passthrough] == [Leaf, Guard, Opaque]
    assert decoded.passthrough[0].to_wire() == unknown
    assert decoded.passthrough[1].literal == "{other_guard}"
    assert decoded.passthrough[2].raw == 7


def test_decode_empty_trigger():
    assert decode(None) == Triggers()
    assert decode({"all": []}) == Triggers()


def test_decode_rejects_non_conjunction():
    """Test triggers that are not an 'all' conjunction raise ParseError."""
    with pytest.raises(ParseError):
        decode({"any": [leaf("in", "invoice.tags.id", ["t-1"])]})


def test_decode_repeated_id_set_field_keeps_extra_leaf():
    """Test a second condition on the same id field is kept aside, not merged."""
    extra = leaf("in", "invoice.tags.id", ["t-2"])
    ast = {"all": [GUARD, leaf("in", "invoice.tags.id", ["t-1"]), extra]}

    decoded = decode_conjunction(ast, guard=GUARD)

    assert decoded.triggers == Triggers(tags=["t-1"])
    assert [e.to_wire() for e in decoded.passthrough] == [extra]


def test_decode_repeated_currency_keeps_extra_leaf():
    """Test only the first currency condition sets the amount currency."""
    extra = leaf("==", "invoice.currency", "USD")
    ast = {
        "all": [
            leaf("==", "invoice.currency", "EUR"),
            leaf(">", "invoice.amount", 100),
            extra,
        ]
    }

    decoded = decode_conjunction(ast)

    assert decoded.triggers.amount == AmountTrigger(currency="EUR", value=[(">", 100)])
    assert [e.to_wire() for e in decoded.passthrough] == [extra]
