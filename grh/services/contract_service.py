"""Employment contracts.

Admins draft and publish contracts after a positive interview; the named
employee signs or rejects them. Missions can only run under a signed
contract.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from grh.core.errors import ConflictError
from grh.models import Contract
from grh.models.enums import ContractState, InterviewOutcome, ProfileName
from grh.services.authorization import Action, Actor, require
from grh.services.base import WorkflowService
from grh.services.notifier import ContractPublished, ContractRejected
from grh.services.status_transitions import (
    ActorRole,
    LifecycleEntity,
    apply_changes,
    apply_transition,
)
from grh.services.validation_rules import EntityKind, validate

logger = logging.getLogger(__name__)

CONTRACT_FIELDS: tuple[str, ...] = (
    "title",
    "employee_id",
    "company_id",
    "interview_id",
    "offer_id",
    "contract_type",
    "position",
    "start_date",
    "end_date",
    "salary",
)


class ContractService(WorkflowService):
    async def create(self, actor: Actor, data: Mapping[str, Any]) -> Contract:
        """Draft a contract.

        Raises:
            ForbiddenError: If the actor is not an admin.
            ValidationError: If fields are invalid.
            NotFoundError: If the employee, company or interview is missing.
            ConflictError: If the linked interview was not evaluated positively.
        """
        require(actor, Action.CONTRACT_CREATE)
        fields = {name: data.get(name) for name in CONTRACT_FIELDS}
        validate(EntityKind.CONTRACT, fields)

        await self._get_or_404(self._repos.users, fields["employee_id"], "Employee")
        await self._get_or_404(self._repos.users, fields["company_id"], "Company")
        if fields["interview_id"] is not None:
            interview = await self._get_or_404(
                self._repos.interviews, fields["interview_id"], "Interview"
            )
            if interview.outcome != InterviewOutcome.POSITIVE.value:
                raise ConflictError(
                    "Contracts require a positively evaluated interview",
                    code="INTERVIEW_NOT_POSITIVE",
                )

        contract = await self._repos.contracts.add(
            Contract(created_by=actor.user_id, state=ContractState.DRAFT.value, **fields)
        )
        logger.info("Contract %s drafted for %s", contract.id, contract.employee_id)
        return contract

    async def _transition(
        self, contract: Contract, target: ContractState, role: ActorRole
    ) -> Contract:
        old_state = contract.state
        result = apply_transition(
            LifecycleEntity.CONTRACT, contract.state, target, role, now=self.now()
        )
        apply_changes(contract, {"state": result.new_status})
        contract = await self._repos.contracts.save(contract)
        logger.info("Contract %s: %s -> %s", contract.id, old_state, contract.state)
        return contract

    async def publish(self, actor: Actor, contract_id: uuid.UUID) -> Contract:
        require(actor, Action.CONTRACT_PUBLISH)
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        contract = await self._transition(contract, ContractState.PUBLISHED, ActorRole.ADMIN)
        await self._dispatcher.dispatch(
            ContractPublished(
                contract_id=contract.id,
                employee_id=contract.employee_id,
                company_id=contract.company_id,
                title=contract.title,
            )
        )
        return contract

    async def sign(self, actor: Actor, contract_id: uuid.UUID) -> Contract:
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        require(actor, Action.CONTRACT_SIGN, contract)
        return await self._transition(contract, ContractState.SIGNED, ActorRole.EMPLOYEE)

    async def reject(self, actor: Actor, contract_id: uuid.UUID) -> Contract:
        """Reject a published contract and notify every admin."""
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        require(actor, Action.CONTRACT_SIGN, contract)
        contract = await self._transition(contract, ContractState.REJECTED, ActorRole.EMPLOYEE)
        admin_ids = await self._repos.users.list_ids_with_profile(ProfileName.ADMIN.value)
        await self._dispatcher.dispatch(
            ContractRejected(
                contract_id=contract.id,
                employee_id=contract.employee_id,
                company_id=contract.company_id,
                title=contract.title,
                admin_ids=tuple(admin_ids),
            )
        )
        return contract

    async def get(self, actor: Actor, contract_id: uuid.UUID) -> Contract:
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        require(actor, Action.CONTRACT_READ, contract)
        return contract

    async def list_mine(self, actor: Actor) -> list[Contract]:
        return await self._repos.contracts.list_for_user(actor.user_id)
