"""Encoder from trigger form state back to the wire conjunction."""
from typing import Any, Iterable

import structlog

from .ast import Condition, Conjunction, Guard, Leaf, Opaque, Operator
from .catalog import AMOUNT_FIELD, CURRENCY_FIELD, ENCODE_ORDER, TriggerKey, get_spec
from .triggers import AmountTrigger, Triggers

log = structlog.get_logger()


def extract_ids(values: Iterable[Any]) -> list[str]:
    """
    Collect ids from plain ids or display objects.

    Display objects may be mappings or objects exposing an ``id`` attribute.
    """
    ids = []
    for value in values:
        if isinstance(value, str):
            ids.append(value)
        elif isinstance(value, dict):
            ids.append(str(value["id"]))
        else:
            ids.append(str(value.id))
    return ids


def _amount_leaves(amount: AmountTrigger) -> list[Condition]:
    if amount.is_range:
        bounds = [(">=", amount.bound(">=")), ("<=", amount.bound("<="))]
    else:
        bounds = list(amount.value)

    leaves = [Condition.of(operator, AMOUNT_FIELD, minor) for operator, minor in bounds]
    leaves.append(Condition.of(Operator.EQ.value, CURRENCY_FIELD, amount.currency))
    return leaves


def encode(
    triggers: Triggers,
    guard: str,
    passthrough: Iterable[Guard | Leaf | Opaque] = (),
) -> Conjunction:
    """
    Build a conjunction from trigger form state.

    Args:
        triggers: Committed triggers
        guard: Boilerplate literal written as the first element
        passthrough: Elements kept from the previous version of the rule,
            appended after the trigger conditions

    Returns:
        Conjunction in deterministic order: guard, created-by, tags,
        counterparts, amount, passthrough
    """
    elements: list[Guard | Leaf | Opaque] = [Guard(literal=guard)]

    for key in ENCODE_ORDER:
        value = triggers.get(key)
        if not value:
            continue

        if key is TriggerKey.AMOUNT:
            if not value.value:
                continue
            leaves = _amount_leaves(value)
        else:
            leaves = [Condition.of(Operator.IN.value, get_spec(key).field, extract_ids(value))]

        elements.extend(Leaf(condition=leaf) for leaf in leaves)

    elements.extend(passthrough)

    log.debug(
        "rule.encoded",
        triggers=[k.value for k in triggers.present_keys()],
        elements=len(elements),
    )
    return Conjunction(elements=elements)
