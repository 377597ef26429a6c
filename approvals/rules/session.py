"""Edit session state machine for the triggers of one policy form."""
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from .catalog import TriggerKey
from .errors import PreconditionViolation
from .script import REQUEST_APPROVAL_BY_USERS, SCRIPT_LABELS, ScriptAssignment
from .triggers import AmountInput, Triggers

log = structlog.get_logger()


class SessionMode(str, Enum):
    IDLE = "idle"
    ADDING = "adding"
    EDITING = "editing"


@dataclass(frozen=True)
class SessionState:
    mode: SessionMode
    trigger_key: TriggerKey | None
    snapshot: Triggers | None


class EditSession:
    """
    Governs which trigger (if any) is being added or edited.

    The session owns the ``triggers`` working copy. Starting an add or edit
    snapshots it; ``cancel`` restores from the snapshot and ``confirm`` keeps
    the in-progress edits. Only one trigger can be in add/edit at a time.
    """

    def __init__(self, triggers: Triggers | None = None, default_currency: str = "EUR"):
        self.triggers = triggers if triggers is not None else Triggers()
        self.default_currency = default_currency
        self._mode = SessionMode.IDLE
        self._trigger_key: TriggerKey | None = None
        self._snapshot: Triggers | None = None
        # Trigger type picked in the "condition type" menu while adding
        self._selected_type: TriggerKey | None = None

    @property
    def mode(self) -> SessionMode:
        return self._mode

    @property
    def trigger_key(self) -> TriggerKey | None:
        return self._trigger_key

    @property
    def snapshot(self) -> Triggers | None:
        return self._snapshot

    @property
    def state(self) -> SessionState:
        return SessionState(self._mode, self._trigger_key, self._snapshot)

    @property
    def is_idle(self) -> bool:
        return self._mode is SessionMode.IDLE

    @property
    def active_trigger(self) -> TriggerKey | None:
        """Trigger whose inputs are shown: the edited one or the type picked while adding."""
        if self._mode is SessionMode.EDITING:
            return self._trigger_key
        if self._mode is SessionMode.ADDING:
            return self._selected_type
        return None

    def _require_idle(self, action: str):
        if not self.is_idle:
            raise PreconditionViolation(
                f"Cannot {action} while {self._mode.value}"
                + (f" '{self._trigger_key.value}'" if self._trigger_key else "")
            )

    def _require_active(self, action: str):
        if self.is_idle:
            raise PreconditionViolation(f"Cannot {action}: no condition is being added or edited")

    def begin_add(self):
        """Start adding a new trigger."""
        self._require_idle("add a condition")
        self._snapshot = self.triggers.model_copy(deep=True)
        self._mode = SessionMode.ADDING
        log.info("session.add_started")

    def begin_edit(self, key: TriggerKey | str):
        """Start editing an existing trigger."""
        key = TriggerKey(key)
        self._require_idle(f"edit '{key.value}'")
        if not self.triggers.has(key):
            raise PreconditionViolation(f"Cannot edit '{key.value}': the policy has no such condition")
        self._snapshot = self.triggers.model_copy(deep=True)
        self._trigger_key = key
        self._mode = SessionMode.EDITING
        log.info("session.edit_started", trigger=key.value)

    def available_trigger_keys(self) -> list[TriggerKey]:
        """
        Trigger types offered in the condition type menu.

        Types already present before the session started are hidden, except
        the one being edited.
        """
        reference = self._snapshot if self._snapshot is not None else self.triggers
        return [
            key for key in TriggerKey
            if not reference.has(key) or key is self._trigger_key
        ]

    def select_trigger_type(self, key: TriggerKey | str):
        """
        Pick which trigger type is being added.

        Switching to another type discards whatever was entered for the
        previous one, so a single add never commits more than one trigger.
        """
        key = TriggerKey(key)
        if self._mode is not SessionMode.ADDING:
            raise PreconditionViolation("A condition type can only be chosen while adding a condition")
        if key not in self.available_trigger_keys():
            raise PreconditionViolation(f"The policy already has a '{key.value}' condition")
        previous = self._selected_type
        if previous is not None and previous is not key:
            self.triggers.set(previous, self._snapshot.get(previous))
            log.debug("session.type_switched", previous=previous.value, trigger=key.value)
        self._selected_type = key

    def update(self, key: TriggerKey | str, value: Any):
        """Write the value of the trigger currently shown in the form."""
        key = TriggerKey(key)
        self._require_active(f"change '{key.value}'")
        if key is not self.active_trigger:
            raise PreconditionViolation(f"'{key.value}' is not the condition being edited")
        self.triggers.set(key, value)

    def amount_input(self) -> AmountInput:
        """Scratch view of the amount trigger for the amount inputs."""
        return AmountInput.from_trigger(self.triggers.amount)

    def set_amount_input(self, amount_input: AmountInput):
        """
        Apply the amount inputs to the canonical amount trigger.

        Incomplete inputs leave the amount trigger unchanged.
        """
        amount = amount_input.to_trigger(self.default_currency)
        if amount is not None:
            self.update(TriggerKey.AMOUNT, amount)

    def cancel(self):
        """Discard the in-progress add or edit."""
        self._require_active("cancel")
        snapshot = self._snapshot
        if self._mode is SessionMode.ADDING:
            for key in TriggerKey:
                self.triggers.set(key, snapshot.get(key))
        else:
            self.triggers.set(self._trigger_key, snapshot.get(self._trigger_key))
        log.info(
            "session.cancelled",
            mode=self._mode.value,
            trigger=self._trigger_key.value if self._trigger_key else None,
        )
        self._reset()

    def confirm(self):
        """Keep the in-progress add or edit."""
        self._require_active("confirm")
        log.info(
            "session.confirmed",
            mode=self._mode.value,
            trigger=(self.active_trigger.value if self.active_trigger else None),
        )
        self._reset()

    def delete(self, key: TriggerKey | str):
        """Remove a trigger; the amount inputs go with the amount trigger."""
        key = TriggerKey(key)
        self._require_idle(f"delete '{key.value}'")
        self.triggers.remove(key)
        log.info("session.trigger_deleted", trigger=key.value)

    def _reset(self):
        self._mode = SessionMode.IDLE
        self._trigger_key = None
        self._snapshot = None
        self._selected_type = None


class ScriptEditor:
    """Edit state of the policy's approval flow, independent of the triggers."""

    def __init__(self, script: ScriptAssignment | None = None):
        self.script = script
        self._call: str | None = None
        self._snapshot: ScriptAssignment | None = None

    @property
    def is_idle(self) -> bool:
        return self._call is None

    @property
    def call(self) -> str | None:
        return self._call

    def begin(self, call: str = REQUEST_APPROVAL_BY_USERS):
        if not self.is_idle:
            raise PreconditionViolation(f"Already editing approval flow '{self._call}'")
        if call not in SCRIPT_LABELS:
            raise PreconditionViolation(f"Unsupported approval flow '{call}'")
        self._snapshot = self.script.model_copy(deep=True) if self.script else None
        if self.script is None or self.script.call != call:
            self.script = ScriptAssignment(call=call)
        self._call = call
        log.info("script.edit_started", call=call)

    def cancel(self):
        if self.is_idle:
            raise PreconditionViolation("Cannot cancel: the approval flow is not being edited")
        self.script = self._snapshot
        log.info("script.cancelled", call=self._call)
        self._call = None
        self._snapshot = None

    def confirm(self):
        if self.is_idle:
            raise PreconditionViolation("Cannot confirm: the approval flow is not being edited")
        log.info("script.confirmed", call=self._call)
        self._call = None
        self._snapshot = None
