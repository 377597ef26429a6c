"""Approval flow ("script") assigned to a policy."""
from typing import Any

from pydantic import BaseModel, Field

REQUEST_APPROVAL_BY_USERS = "ApprovalRequests.request_approval_by_users"

SCRIPT_LABELS = {
    REQUEST_APPROVAL_BY_USERS: "User from the list - Any",
}


class ScriptAssignment(BaseModel):
    """Single script call requesting approval from a list of users."""
    call: str = Field(default=REQUEST_APPROVAL_BY_USERS, description="Script call identifier")
    user_ids: list[str] = Field(default_factory=list, description="Users asked for approval")
    required_approval_count: int = Field(default=1, ge=1)

    @classmethod
    def from_wire(cls, script: Any) -> "ScriptAssignment | None":
        """
        Read the first supported call out of a policy script.

        Returns:
            ScriptAssignment, or None when the script holds no supported call
        """
        if not isinstance(script, list):
            return None
        for step in script:
            if isinstance(step, dict) and step.get("call") in SCRIPT_LABELS:
                params = step.get("params") or {}
                return cls(
                    call=step["call"],
                    user_ids=[str(u) for u in params.get("user_ids") or []],
                    required_approval_count=params.get("required_approval_count") or 1,
                )
        return None

    def to_wire(self) -> list[dict[str, Any]]:
        return [
            {
                "call": self.call,
                "params": {
                    "user_ids": list(self.user_ids),
                    "required_approval_count": self.required_approval_count,
                },
            }
        ]
