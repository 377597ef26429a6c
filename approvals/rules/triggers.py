"""Typed, editable form state decoded from a policy trigger."""
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .ast import COMPARISON_OPERATORS
from .catalog import TriggerKey
from .currency import from_minor_units, to_minor_units
from .errors import ParseError

RANGE = "range"

AmountBound = tuple[str, int]


class AmountTrigger(BaseModel):
    """Amount condition in minor units, bound to one currency."""
    currency: str = Field(..., description="ISO 4217 currency code")
    value: list[AmountBound] = Field(
        default_factory=list,
        description="(operator, minor units) bounds; two bounds form a >=/<= range"
    )

    @property
    def is_range(self) -> bool:
        return len(self.value) == 2 and {op for op, _ in self.value} == {">=", "<="}

    def bound(self, operator: str) -> int | None:
        for op, amount in self.value:
            if op == operator:
                return amount
        return None


class Triggers(BaseModel):
    """
    Trigger slots of an approval policy.

    Each slot is either absent (None) or carries the decoded value. Id-set
    slots hold plain ids; resolving them to display objects is left to the
    entity directory.
    """
    model_config = ConfigDict(validate_assignment=True)

    amount: AmountTrigger | None = None
    counterpart_id: list[str] | None = None
    was_created_by_user_id: list[str] | None = None
    tags: list[str] | None = None

    def get(self, key: TriggerKey | str) -> Any:
        return getattr(self, TriggerKey(key).value)

    def set(self, key: TriggerKey | str, value: Any):
        setattr(self, TriggerKey(key).value, value)

    def has(self, key: TriggerKey | str) -> bool:
        return self.get(key) is not None

    def remove(self, key: TriggerKey | str):
        self.set(key, None)

    def present_keys(self) -> list[TriggerKey]:
        return [key for key in TriggerKey if self.has(key)]

    def normalized(self) -> "Triggers":
        """Copy with amount bounds sorted, for order-insensitive comparison."""
        copy = self.model_copy(deep=True)
        if copy.amount is not None:
            copy.amount.value = sorted(copy.amount.value)
        return copy

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class AmountInput(BaseModel):
    """
    Scratch view of the amount trigger as the form inputs show it.

    Values are in major units. The view is always derived from the canonical
    ``AmountTrigger``; writing it back goes through ``to_trigger``.
    """
    operator: str | None = None
    value: Decimal | None = None
    range_left: Decimal | None = None
    range_right: Decimal | None = None
    currency: str | None = None

    @classmethod
    def from_trigger(cls, amount: AmountTrigger | None) -> "AmountInput":
        if amount is None or not amount.value:
            return cls()

        currency = amount.currency
        if amount.is_range:
            return cls(
                operator=RANGE,
                range_left=from_minor_units(amount.bound(">="), currency),
                range_right=from_minor_units(amount.bound("<="), currency),
                currency=currency,
            )

        operator, minor = amount.value[0]
        return cls(
            operator=operator,
            value=from_minor_units(minor, currency),
            currency=currency,
        )

    def to_trigger(self, default_currency: str) -> AmountTrigger | None:
        """
        Build the canonical amount trigger from the inputs.

        Returns:
            AmountTrigger, or None while the inputs are incomplete

        Raises:
            ParseError: for an operator the amount trigger does not support
        """
        if self.operator is None:
            return None

        currency = self.currency or default_currency
        if self.operator == RANGE:
            if self.range_left is None or self.range_right is None:
                return None
            return AmountTrigger(
                currency=currency,
                value=[
                    (">=", to_minor_units(self.range_left, currency)),
                    ("<=", to_minor_units(self.range_right, currency)),
                ],
            )

        if self.operator not in COMPARISON_OPERATORS:
            raise ParseError("amountOperator", self.operator, "unsupported operator")
        if self.value is None:
            return None
        return AmountTrigger(
            currency=currency,
            value=[(self.operator, to_minor_units(self.value, currency))],
        )
