"""Fetch/save interface for approval policies and its in-memory backend.

The policy editor only needs to read a policy by id and to save a whole
policy body back. ``PolicyGateway`` is that seam; ``InMemoryPolicyStore``
backs the HTTP API and the tests.
"""
from abc import ABC, abstractmethod
import time
import structlog
from .models import ApprovalPolicyResource, ApprovalPolicySaveRequest, ApprovalPolicyUpdate

log = structlog.get_logger()


class PolicyGateway(ABC):
    """Abstract interface for approval policy storage."""

    @abstractmethod
    async def get(self, policy_id: str) -> ApprovalPolicyResource | None:
        """
        Get a policy by ID.

        Args:
            policy_id: Policy identifier

        Returns:
            Policy if found, None otherwise
        """
        pass

    @abstractmethod
    async def create(self, request: ApprovalPolicySaveRequest) -> ApprovalPolicyResource:
        """
        Create a policy.

        Args:
            request: Policy body

        Returns:
            The stored policy with its assigned ID
        """
        pass

    @abstractmethod
    async def update(self, policy_id: str, update: ApprovalPolicyUpdate) -> ApprovalPolicyResource | None:
        """
        Patch a policy.

        Args:
            policy_id: Policy identifier
            update: Fields to change

        Returns:
            Updated policy, or None if not found
        """
        pass


class InMemoryPolicyStore(PolicyGateway):
    """In-memory approval policy storage."""

    def __init__(self):
        self._policies: dict[str, ApprovalPolicyResource] = {}
        log.info("policies.store.initialized", backend="memory")

    async def get(self, policy_id: str) -> ApprovalPolicyResource | None:
        return self._policies.get(policy_id)

    async def create(self, request: ApprovalPolicySaveRequest) -> ApprovalPolicyResource:
        policy = ApprovalPolicyResource(**request.model_dump())
        self._policies[policy.id] = policy
        log.info("policy.created", policy_id=policy.id, policy_name=policy.name)
        return policy

    async def update(self, policy_id: str, update: ApprovalPolicyUpdate) -> ApprovalPolicyResource | None:
        existing = self._policies.get(policy_id)
        if existing is None:
            return None
        changes = update.model_dump(exclude_none=True)
        policy = existing.model_copy(update={**changes, "updated_at": time.time()})
        self._policies[policy_id] = policy
        log.info("policy.updated", policy_id=policy_id, fields=sorted(changes))
        return policy

    async def list_all(self) -> list[ApprovalPolicyResource]:
        return list(self._policies.values())

    async def delete(self, policy_id: str) -> bool:
        if policy_id in self._policies:
            del self._policies[policy_id]
            log.info("policy.deleted", policy_id=policy_id)
            return True
        return False

    async def count(self) -> int:
        return len(self._policies)


# Global store instance backing the HTTP API
policy_store = InMemoryPolicyStore()
