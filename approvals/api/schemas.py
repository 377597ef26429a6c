from pydantic import BaseModel, Field
from typing import Any, Dict, List
from ..policies.directory import EntityRef
from ..policies.models import ApprovalPolicyResource
from ..rules.triggers import Triggers

class DecodeRequest(BaseModel):
    trigger: Dict[str, Any] | None = None

class DecodeResponse(BaseModel):
    triggers: Triggers
    passthrough: List[Any] = Field(default_factory=list)
    summary: List[str] = Field(default_factory=list)

class EncodeRequest(BaseModel):
    triggers: Triggers
    passthrough: List[Any] = Field(default_factory=list)

class EncodeResponse(BaseModel):
    trigger: Dict[str, Any]

class PolicyListResponse(BaseModel):
    total: int
    policies: List[ApprovalPolicyResource]

class PolicyTriggersResponse(BaseModel):
    policy_id: str
    triggers: Triggers
    summary: List[str] = Field(default_factory=list)
    references: Dict[str, List[EntityRef]] = Field(default_factory=dict)
