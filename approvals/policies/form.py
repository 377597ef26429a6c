"""Approval policy edit form: trigger and approval flow editing plus save."""
import structlog

from ..config import Settings, get_settings
from ..metrics import Metrics, metrics as default_metrics
from ..rules.catalog import ID_SET_KEYS, TriggerKey, get_spec
from ..rules.decoder import decode_conjunction
from ..rules.encoder import encode
from ..rules.errors import ParseError, PolicyNotFound, PreconditionViolation, SaveFailure
from ..rules.script import REQUEST_APPROVAL_BY_USERS, ScriptAssignment
from ..rules.session import EditSession, ScriptEditor
from ..rules.triggers import Triggers
from .directory import EntityDirectory, EntityRef
from .gateway import PolicyGateway
from .models import ApprovalPolicyResource, ApprovalPolicySaveRequest, ApprovalPolicyUpdate

log = structlog.get_logger()


class ApprovalPolicyForm:
    """
    Editable state of one approval policy.

    Holds the plain fields (name, description), a trigger ``EditSession`` and
    a ``ScriptEditor`` for the approval flow. Only one of the two editors can
    be active at a time. Nothing is persisted until ``submit``.
    """

    def __init__(
        self,
        gateway: PolicyGateway,
        directory: EntityDirectory,
        policy: ApprovalPolicyResource | None = None,
        settings: Settings | None = None,
        metrics: Metrics | None = None,
    ):
        """
        Initialize the form from an existing policy or empty.

        Args:
            gateway: Policy fetch/save interface
            directory: Lookup for ids referenced by triggers
            policy: Policy to edit; None starts a new policy
            settings: Service settings (defaults to global settings)
            metrics: Metrics instance (defaults to the shared one)

        Raises:
            ParseError: if the policy trigger cannot be decoded
        """
        self.gateway = gateway
        self.directory = directory
        self.settings = settings or get_settings()
        self.metrics = metrics or default_metrics

        self.policy_id = policy.id if policy else None
        self.name = policy.name if policy else ""
        self.description = policy.description if policy else ""

        try:
            decoded = decode_conjunction(
                policy.trigger if policy else None,
                guard=self.settings.LEADING_GUARD,
                default_currency=self.settings.DEFAULT_CURRENCY,
            )
        except ParseError as e:
            self.metrics.rules_decoded_total.labels(outcome="parse_error").inc()
            log.warning("policy.decode_failed", policy_id=self.policy_id, error=str(e))
            raise

        self.metrics.rules_decoded_total.labels(outcome="ok").inc()
        if decoded.passthrough:
            self.metrics.conditions_unrecognised_total.inc(len(decoded.passthrough))

        # Elements of the stored trigger the form does not represent
        self.passthrough = decoded.passthrough if self.settings.PRESERVE_UNKNOWN_CONDITIONS else []

        self.session = EditSession(decoded.triggers, default_currency=self.settings.DEFAULT_CURRENCY)
        self.script_editor = ScriptEditor(
            ScriptAssignment.from_wire(policy.script) if policy else None
        )

    @classmethod
    async def open(
        cls,
        gateway: PolicyGateway,
        directory: EntityDirectory,
        policy_id: str | None = None,
        settings: Settings | None = None,
        metrics: Metrics | None = None,
    ) -> "ApprovalPolicyForm":
        """
        Load a policy through the gateway and open it for editing.

        Raises:
            PolicyNotFound: if policy_id is unknown to the gateway
            ParseError: if the stored trigger cannot be decoded
        """
        policy = None
        if policy_id is not None:
            policy = await gateway.get(policy_id)
            if policy is None:
                raise PolicyNotFound(policy_id)
        return cls(gateway, directory, policy, settings=settings, metrics=metrics)

    @property
    def triggers(self) -> Triggers:
        return self.session.triggers

    @property
    def script(self) -> ScriptAssignment | None:
        return self.script_editor.script

    @property
    def is_editing(self) -> bool:
        return not (self.session.is_idle and self.script_editor.is_idle)

    def begin_add_trigger(self):
        if not self.script_editor.is_idle:
            raise PreconditionViolation("Finish editing the approval flow before adding a condition")
        self.session.begin_add()

    def begin_edit_trigger(self, key: TriggerKey | str):
        if not self.script_editor.is_idle:
            raise PreconditionViolation("Finish editing the approval flow before editing a condition")
        self.session.begin_edit(key)

    def delete_trigger(self, key: TriggerKey | str):
        if not self.script_editor.is_idle:
            raise PreconditionViolation("Finish editing the approval flow before deleting a condition")
        self.session.delete(key)

    def begin_edit_script(self, call: str = REQUEST_APPROVAL_BY_USERS):
        if not self.session.is_idle:
            raise PreconditionViolation("Finish editing the condition before changing the approval flow")
        self.script_editor.begin(call)

    def cancel(self):
        """Discard whichever edit is in progress."""
        if not self.session.is_idle:
            self.session.cancel()
        elif not self.script_editor.is_idle:
            self.script_editor.cancel()
        else:
            raise PreconditionViolation("Nothing to cancel")

    def confirm(self):
        """Keep whichever edit is in progress."""
        if not self.session.is_idle:
            self.session.confirm()
        elif not self.script_editor.is_idle:
            self.script_editor.confirm()
        else:
            raise PreconditionViolation("Nothing to confirm")

    async def resolve_references(self) -> dict[TriggerKey, list[EntityRef]]:
        """Resolve the ids of every id-set trigger to display objects."""
        resolved: dict[TriggerKey, list[EntityRef]] = {}
        for key in ID_SET_KEYS:
            ids = self.triggers.get(key)
            if ids:
                resolved[key] = await self.directory.resolve(get_spec(key).entity, ids)
        return resolved

    def build_request(self) -> ApprovalPolicySaveRequest:
        """
        Encode the committed form state into a save request body.

        Raises:
            PreconditionViolation: if the policy has no name
        """
        if not self.name.strip():
            raise PreconditionViolation("Name the approval policy before saving")
        conjunction = encode(self.triggers, self.settings.LEADING_GUARD, self.passthrough)
        self.metrics.rules_encoded_total.inc()
        script = self.script or ScriptAssignment()
        return ApprovalPolicySaveRequest(
            name=self.name,
            description=self.description,
            trigger=conjunction.to_wire(),
            script=script.to_wire(),
        )

    async def submit(self) -> ApprovalPolicyResource:
        """
        Save the policy through the gateway.

        Returns:
            The saved policy

        Raises:
            PreconditionViolation: if a condition or approval flow edit is still open,
                or the policy has no name
            SaveFailure: if the gateway rejects the save; the form keeps its state
        """
        if self.is_editing:
            raise PreconditionViolation("Confirm or cancel the open edit before saving")

        request = self.build_request()
        operation = "update" if self.policy_id else "create"
        try:
            if self.policy_id:
                saved = await self.gateway.update(
                    self.policy_id, ApprovalPolicyUpdate(**request.model_dump())
                )
                if saved is None:
                    raise PolicyNotFound(self.policy_id)
            else:
                saved = await self.gateway.create(request)
        except Exception as e:
            self.metrics.policy_saves_total.labels(operation=operation, outcome="failure").inc()
            log.warning("policy.save_failed", policy_id=self.policy_id, operation=operation, error=str(e))
            raise SaveFailure(self.policy_id, str(e)) from e

        self.metrics.policy_saves_total.labels(operation=operation, outcome="success").inc()
        log.info("policy.saved", policy_id=saved.id, operation=operation)
        self.policy_id = saved.id
        return saved
