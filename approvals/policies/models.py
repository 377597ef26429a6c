"""Approval policy resource models."""
from pydantic import BaseModel, Field
from typing import Any
import uuid, time


class ApprovalPolicySaveRequest(BaseModel):
    """Body sent to create a policy or replace its editable fields."""
    name: str = Field(..., min_length=1, description="Policy name")
    description: str = Field(default="", description="Free text description")
    trigger: dict[str, Any] | None = Field(default=None, description="Rule conjunction ({'all': [...]})")
    script: list[dict[str, Any]] = Field(default_factory=list, description="Approval flow calls")


class ApprovalPolicyUpdate(BaseModel):
    """Partial update; fields left as None are kept."""
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    trigger: dict[str, Any] | None = None
    script: list[dict[str, Any]] | None = None


class ApprovalPolicyResource(ApprovalPolicySaveRequest):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    created_at: float = Field(default_factory=lambda: time.time())
    updated_at: float = Field(default_factory=lambda: time.time())
