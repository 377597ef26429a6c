"""Errors raised by the rule model."""


class RuleModelError(Exception):
    """Base exception for rule model errors"""
    pass


class ParseError(RuleModelError):
    """Raised when a trigger operand cannot be read during decode"""

    def __init__(self, field: str, value, reason: str = "not an integer"):
        self.field = field
        self.value = value
        super().__init__(f"Cannot read value {value!r} of {field}: {reason}")


class PreconditionViolation(RuleModelError):
    """Raised when an edit transition is requested from the wrong state"""
    pass


class PolicyNotFound(RuleModelError):
    """Raised when the policy to edit does not exist"""

    def __init__(self, policy_id: str):
        self.policy_id = policy_id
        super().__init__(f"Approval policy {policy_id} not found")


class SaveFailure(RuleModelError):
    """Raised when the policy could not be saved; the edits are kept"""

    def __init__(self, policy_id: str | None, reason: str):
        self.policy_id = policy_id
        self.reason = reason
        target = f"approval policy {policy_id}" if policy_id else "new approval policy"
        super().__init__(f"Could not save {target}: {reason}")
