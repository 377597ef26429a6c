"""Wire models for approval policy trigger conditions.

A policy trigger travels as a JSON conjunction:

    {"all": ["{event_name == 'submitted_for_approval'}",
             {"operator": "in",
              "left_operand": {"name": "invoice.tags.id"},
              "right_operand": ["tag-1"]}]}

Every element of ``all`` is parsed into a tagged variant so callers never have
to guess what a raw element is: ``Guard`` for bare string literals, ``Leaf``
for well-formed conditions and ``Opaque`` for anything else.
"""
from enum import Enum
from typing import Annotated, Any, Literal, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field

from .errors import ParseError

CONDITION_KEYS = ("operator", "left_operand", "right_operand")


class Operator(str, Enum):
    """Operators understood by the trigger editor."""
    EQ = "=="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    IN = "in"
    NOT_IN = "not_in"


COMPARISON_OPERATORS = frozenset({
    Operator.GT.value,
    Operator.LT.value,
    Operator.GE.value,
    Operator.LE.value,
    Operator.EQ.value,
})


class NamedOperand(BaseModel):
    """Reference to a field of the evaluated document."""
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Dotted field path, e.g. invoice.amount")


class Condition(BaseModel):
    """Single ``operator(left_operand, right_operand)`` predicate."""
    model_config = ConfigDict(extra="allow")

    operator: str
    left_operand: NamedOperand
    right_operand: Any = None

    @classmethod
    def of(cls, operator: str, field: str, right_operand: Any) -> "Condition":
        return cls(
            operator=operator,
            left_operand=NamedOperand(name=field),
            right_operand=right_operand,
        )

    @property
    def field(self) -> str:
        return self.left_operand.name

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump()


class Guard(BaseModel):
    """Bare string literal carried in the conjunction (e.g. an event guard)."""
    kind: Literal["guard"] = "guard"
    literal: str

    def to_wire(self) -> str:
        return self.literal


class Leaf(BaseModel):
    """Conjunction element holding a well-formed condition."""
    kind: Literal["leaf"] = "leaf"
    condition: Condition

    def to_wire(self) -> dict[str, Any]:
        return self.condition.to_wire()


class Opaque(BaseModel):
    """Element that is neither a string nor a readable condition; kept verbatim."""
    kind: Literal["opaque"] = "opaque"
    raw: Any

    def to_wire(self) -> Any:
        return self.raw


ConjunctionElement = Annotated[Union[Guard, Leaf, Opaque], Field(discriminator="kind")]


def parse_element(raw: Any) -> Guard | Leaf | Opaque:
    """Classify one raw element of a conjunction's ``all`` array."""
    if isinstance(raw, str):
        return Guard(literal=raw)

    if isinstance(raw, dict) and all(key in raw for key in CONDITION_KEYS):
        left = raw["left_operand"]
        if (
            isinstance(raw["operator"], str)
            and isinstance(left, dict)
            and isinstance(left.get("name"), str)
        ):
            return Leaf(condition=Condition.model_validate(raw))

    return Opaque(raw=raw)


class Conjunction(BaseModel):
    """An "ALL of" grouping of conditions and guard literals."""
    elements: list[ConjunctionElement] = Field(default_factory=list)

    @classmethod
    def from_wire(cls, data: Any) -> "Conjunction":
        """
        Build a conjunction from its JSON shape.

        Args:
            data: Decoded JSON, ``{"all": [...]}`` or None for an empty trigger

        Returns:
            Conjunction with every element classified

        Raises:
            ParseError: if data is not an ``all`` conjunction
        """
        if data is None:
            return cls()
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict) or not isinstance(data.get("all"), list):
            raise ParseError("trigger", data, "expected an object with an 'all' list")
        return cls(elements=[parse_element(raw) for raw in data["all"]])

    @classmethod
    def from_json(cls, payload: str | bytes) -> "Conjunction":
        try:
            data = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise ParseError("trigger", payload, f"invalid JSON ({e})")
        return cls.from_wire(data)

    @property
    def leaves(self) -> list[Condition]:
        return [e.condition for e in self.elements if isinstance(e, Leaf)]

    def to_wire(self) -> dict[str, list[Any]]:
        return {"all": [element.to_wire() for element in self.elements]}

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_wire())
