"""
Approval policy trigger model

Converts the generic rule conjunction stored on a policy into editable
trigger form state and back:
- Wire models with tagged guard/leaf elements
- Trigger catalog and summary labels
- Decoder and encoder
- Edit session state machine for adding, editing and deleting triggers
"""

from .ast import Condition, Conjunction, Guard, Leaf, Opaque, Operator
from .catalog import TriggerKey, TriggerKind, TRIGGER_CATALOG, summarize, trigger_label
from .decoder import DecodedRule, decode, decode_conjunction
from .encoder import encode
from .errors import ParseError, PolicyNotFound, PreconditionViolation, RuleModelError, SaveFailure
from .script import ScriptAssignment
from .session import EditSession, ScriptEditor, SessionMode
from .triggers import AmountInput, AmountTrigger, Triggers

__all__ = [
    "Condition",
    "Conjunction",
    "Guard",
    "Leaf",
    "Opaque",
    "Operator",
    "TriggerKey",
    "TriggerKind",
    "TRIGGER_CATALOG",
    "summarize",
    "trigger_label",
    "DecodedRule",
    "decode",
    "decode_conjunction",
    "encode",
    "ParseError",
    "PolicyNotFound",
    "PreconditionViolation",
    "RuleModelError",
    "SaveFailure",
    "ScriptAssignment",
    "EditSession",
    "ScriptEditor",
    "SessionMode",
    "AmountInput",
    "AmountTrigger",
    "Triggers",
]
