"""Decoder from the wire conjunction to editable trigger form state."""
from dataclasses import dataclass, field
from typing import Any

import structlog

from .ast import COMPARISON_OPERATORS, Conjunction, Guard, Leaf, Opaque, Operator
from .catalog import (
    AMOUNT_FIELD,
    CURRENCY_FIELD,
    COUNTERPART_FIELD,
    CREATED_BY_FIELD,
    TAGS_FIELD,
    TriggerKey,
)
from .errors import ParseError
from .triggers import AmountTrigger, Triggers

log = structlog.get_logger()

DEFAULT_CURRENCY = "EUR"

_ID_SET_FIELDS = {
    COUNTERPART_FIELD: TriggerKey.COUNTERPART_ID,
    CREATED_BY_FIELD: TriggerKey.WAS_CREATED_BY_USER_ID,
    TAGS_FIELD: TriggerKey.TAGS,
}


@dataclass
class DecodedRule:
    """Result of decoding a conjunction.

    ``passthrough`` holds, in their original order, the elements the trigger
    form does not represent. Handing them back to ``encode`` keeps them on save.
    """
    triggers: Triggers
    passthrough: list[Guard | Leaf | Opaque] = field(default_factory=list)


def coerce_minor_units(value: Any, field_name: str = AMOUNT_FIELD) -> int:
    """
    Read an amount operand as an integer number of minor units.

    Raises:
        ParseError: if the value is not an integer or an integer string
    """
    if isinstance(value, bool):
        raise ParseError(field_name, value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ParseError(field_name, value)
    raise ParseError(field_name, value)


def _id_list(value: Any) -> list[str]:
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    return [str(value)]


def decode_conjunction(
    ast: Conjunction | dict | None,
    guard: str | None = None,
    default_currency: str = DEFAULT_CURRENCY,
) -> DecodedRule:
    """
    Project a conjunction onto the trigger form state.

    Args:
        ast: Conjunction, or its JSON shape
        guard: Fixed leading guard literal; it is regenerated on encode and
            therefore not kept in the passthrough
        default_currency: Currency used when amount bounds come without one

    Returns:
        DecodedRule with the triggers and the unconsumed elements

    Raises:
        ParseError: if an amount bound is not an integer
    """
    conjunction = Conjunction.from_wire(ast)
    triggers = Triggers()
    passthrough: list[Guard | Leaf | Opaque] = []

    currency: str | None = None
    bounds: list[tuple[str, int]] = []
    amount_seen = False

    for element in conjunction.elements:
        if not isinstance(element, Leaf):
            if not (isinstance(element, Guard) and element.literal == guard):
                passthrough.append(element)
            continue

        condition = element.condition
        name = condition.field
        operator = condition.operator

        # A slot holds one leaf; repeats of the same field are kept aside
        if name == CURRENCY_FIELD and operator == Operator.EQ.value and currency is None:
            currency = str(condition.right_operand)
            amount_seen = True
        elif name == AMOUNT_FIELD and operator in COMPARISON_OPERATORS:
            bounds.append((operator, coerce_minor_units(condition.right_operand)))
            amount_seen = True
        elif (
            name in _ID_SET_FIELDS
            and operator == Operator.IN.value
            and not triggers.has(_ID_SET_FIELDS[name])
        ):
            triggers.set(_ID_SET_FIELDS[name], _id_list(condition.right_operand))
        else:
            log.debug("rule.condition_unrecognised", field=name, operator=operator)
            passthrough.append(element)

    if amount_seen:
        triggers.amount = AmountTrigger(currency=currency or default_currency, value=bounds)

    log.debug(
        "rule.decoded",
        triggers=[k.value for k in triggers.present_keys()],
        passthrough=len(passthrough),
    )
    return DecodedRule(triggers=triggers, passthrough=passthrough)


def decode(ast: Conjunction | dict | None, default_currency: str = DEFAULT_CURRENCY) -> Triggers:
    """Decode a conjunction into Triggers, dropping anything the form cannot show."""
    return decode_conjunction(ast, default_currency=default_currency).triggers
