"""Registry of the trigger types the policy editor understands."""
from dataclasses import dataclass
from enum import Enum

from .ast import Conjunction

AMOUNT_FIELD = "invoice.amount"
CURRENCY_FIELD = "invoice.currency"
COUNTERPART_FIELD = "invoice.counterpart_id"
CREATED_BY_FIELD = "invoice.was_created_by_user_id"
TAGS_FIELD = "invoice.tags.id"


class TriggerKey(str, Enum):
    """Trigger slots of the editable form state."""
    AMOUNT = "amount"
    COUNTERPART_ID = "counterpart_id"
    WAS_CREATED_BY_USER_ID = "was_created_by_user_id"
    TAGS = "tags"


class TriggerKind(str, Enum):
    """How a trigger's value is shaped."""
    AMOUNT_RANGE = "amount_range"
    ID_SET = "id_set"


@dataclass(frozen=True)
class TriggerSpec:
    key: TriggerKey
    field: str
    kind: TriggerKind
    label: str
    # Entity type resolved by the directory for id-set triggers
    entity: str | None = None


TRIGGER_CATALOG: dict[TriggerKey, TriggerSpec] = {
    TriggerKey.AMOUNT: TriggerSpec(
        TriggerKey.AMOUNT, AMOUNT_FIELD, TriggerKind.AMOUNT_RANGE, "Amount"
    ),
    TriggerKey.COUNTERPART_ID: TriggerSpec(
        TriggerKey.COUNTERPART_ID, COUNTERPART_FIELD, TriggerKind.ID_SET, "Counterparts",
        entity="counterpart",
    ),
    TriggerKey.WAS_CREATED_BY_USER_ID: TriggerSpec(
        TriggerKey.WAS_CREATED_BY_USER_ID, CREATED_BY_FIELD, TriggerKind.ID_SET, "Created by user",
        entity="user",
    ),
    TriggerKey.TAGS: TriggerSpec(
        TriggerKey.TAGS, TAGS_FIELD, TriggerKind.ID_SET, "Tags",
        entity="tag",
    ),
}

# Order in which triggers are written back to the wire
ENCODE_ORDER = (
    TriggerKey.WAS_CREATED_BY_USER_ID,
    TriggerKey.TAGS,
    TriggerKey.COUNTERPART_ID,
    TriggerKey.AMOUNT,
)

ID_SET_KEYS = tuple(k for k, spec in TRIGGER_CATALOG.items() if spec.kind is TriggerKind.ID_SET)

# Field names shown in policy listings; older policies reference tags as invoice.tags
_SUMMARY_LABELS = {
    AMOUNT_FIELD: "Amount",
    CURRENCY_FIELD: "Currency",
    CREATED_BY_FIELD: "Created by user",
    COUNTERPART_FIELD: "Counterparts",
    "invoice.tags": "Tags",
    TAGS_FIELD: "Tags",
}


def get_spec(key: TriggerKey | str) -> TriggerSpec:
    return TRIGGER_CATALOG[TriggerKey(key)]


def trigger_label(key: TriggerKey | str) -> str:
    """Human-readable name of a trigger type."""
    return get_spec(key).label


def summarize(conjunction: Conjunction) -> list[str]:
    """
    List the labels of the trigger fields referenced by a conjunction.

    Labels are unique and keep the order of first appearance. Fields the
    editor does not know are skipped.
    """
    labels: list[str] = []
    for condition in conjunction.leaves:
        label = _SUMMARY_LABELS.get(condition.field)
        if label and label not in labels:
            labels.append(label)
    return labels
