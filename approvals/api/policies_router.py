"""API routes for approval policy management."""
from fastapi import APIRouter, HTTPException
from .schemas import PolicyListResponse, PolicyTriggersResponse
from ..config import get_settings
from ..policies.directory import entity_directory
from ..policies.form import ApprovalPolicyForm
from ..policies.gateway import policy_store
from ..policies.models import ApprovalPolicyResource, ApprovalPolicySaveRequest, ApprovalPolicyUpdate
from ..rules.ast import Conjunction
from ..rules.catalog import summarize

router = APIRouter(prefix="/v1/approval-policies", tags=["approval-policies"])


@router.post("", response_model=ApprovalPolicyResource, status_code=201)
async def create_policy(req: ApprovalPolicySaveRequest):
    """Create an approval policy."""
    # Reject triggers the editor could not open later
    Conjunction.from_wire(req.trigger)
    return await policy_store.create(req)


@router.get("", response_model=PolicyListResponse)
async def list_policies():
    """List all approval policies."""
    policies = await policy_store.list_all()
    return PolicyListResponse(total=len(policies), policies=policies)


@router.get("/{policy_id}", response_model=ApprovalPolicyResource)
async def get_policy(policy_id: str):
    """Get a specific approval policy by ID."""
    policy = await policy_store.get(policy_id)
    if not policy:
        raise HTTPException(404, detail=f"Approval policy {policy_id} not found")
    return policy


@router.patch("/{policy_id}", response_model=ApprovalPolicyResource)
async def update_policy(policy_id: str, update: ApprovalPolicyUpdate):
    """Update fields of an existing approval policy."""
    if update.trigger is not None:
        Conjunction.from_wire(update.trigger)
    saved = await policy_store.update(policy_id, update)
    if not saved:
        raise HTTPException(404, detail=f"Approval policy {policy_id} not found")
    return saved


@router.delete("/{policy_id}", status_code=204)
async def delete_policy(policy_id: str):
    """Delete an approval policy."""
    deleted = await policy_store.delete(policy_id)
    if not deleted:
        raise HTTPException(404, detail=f"Approval policy {policy_id} not found")
    return None


@router.get("/{policy_id}/triggers", response_model=PolicyTriggersResponse)
async def get_policy_triggers(policy_id: str):
    """Decoded triggers of a policy with their referenced entities resolved."""
    policy = await policy_store.get(policy_id)
    if not policy:
        raise HTTPException(404, detail=f"Approval policy {policy_id} not found")
    form = ApprovalPolicyForm(policy_store, entity_directory, policy, settings=get_settings())
    references = await form.resolve_references()
    return PolicyTriggersResponse(
        policy_id=policy_id,
        triggers=form.triggers,
        summary=summarize(Conjunction.from_wire(policy.trigger)),
        references={key.value: refs for key, refs in references.items()},
    )
