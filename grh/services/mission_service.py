"""Missions carried out under signed contracts.

Lifecycle:
    todo -> in-progress -> done                (assigned employee)
    done -> validated | in-progress            (owning company)
    any non-terminal -> cancelled              (company or admin)

After company validation an admin reviews the mission separately
(``admin_validation``). The employee submits a PDF report once the mission
is done; the company comments on it with feedback.

Mission creation commits before notifying: a notification that cannot be
stored is parked in the outbox and never undoes the mission.
"""

import logging
import uuid
from collections.abc import Mapping
from typing import Any

from grh.core.errors import (
    APIError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from grh.core.file_validation import require_pdf_signature
from grh.models import Mission, MissionFeedback
from grh.models.enums import ContractState, MissionStatus, ValidationState
from grh.repositories.interfaces import MissionFilters, Repositories
from grh.services.authorization import Action, Actor, require
from grh.services.base import Clock, WorkflowService, utc_now
from grh.services.blob_store import BlobStore, DatabaseBlobStore, StoredBlob
from grh.services.notification_dispatch import NotificationDispatcher
from grh.services.notifier import MissionCreated, MissionFeedbackAdded
from grh.services.status_transitions import (
    ActorRole,
    LifecycleEntity,
    TerminalStatusError,
    apply_changes,
    apply_transition,
    is_terminal,
)
from grh.services.validation_rules import EntityKind, snapshot, validate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS: tuple[str, ...] = ("title", "description", "start_date", "end_date")
_RULE_FIELDS: tuple[str, ...] = (*EDITABLE_FIELDS, "employee_id", "contract_id")

VALIDATE = "validate"
REJECT = "reject"
_REVIEW_ACTIONS = (VALIDATE, REJECT)


def _check_review_action(action: str) -> None:
    if action not in _REVIEW_ACTIONS:
        raise ValidationError(
            message="Invalid action",
            details=[{"field": "action", "message": f"Must be one of {list(_REVIEW_ACTIONS)}"}],
        )


class MissionService(WorkflowService):
    """Mission workflow.

    Args:
        repos: Per-request repositories.
        report_store: Blob store for mission reports. Defaults to the
            database store over ``repos.files``.
        dispatcher: Notification dispatcher.
        clock: Current-time provider.
    """

    def __init__(
        self,
        repos: Repositories,
        report_store: BlobStore | None = None,
        dispatcher: NotificationDispatcher | None = None,
        *,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(repos, dispatcher, clock=clock)
        self._report_store = report_store or DatabaseBlobStore(repos.files)

    async def _load(self, mission_id: uuid.UUID) -> Mission:
        return await self._get_or_404(self._repos.missions, mission_id, "Mission")

    async def _transition(
        self, mission: Mission, target: MissionStatus | str, role: ActorRole
    ) -> Mission:
        old_status = mission.status
        result = apply_transition(
            LifecycleEntity.MISSION, mission.status, target, role, now=self.now()
        )
        apply_changes(mission, result.changes)
        mission = await self._repos.missions.save(mission)
        logger.info("Mission %s: %s -> %s", mission.id, old_status, mission.status)
        return mission

    # -----------------------------------------------------------------------
    # Create / update / delete
    # -----------------------------------------------------------------------

    async def create(self, actor: Actor, data: Mapping[str, Any]) -> Mission:
        """Create a mission under a signed contract and notify the employee.

        Raises:
            ForbiddenError: If the actor is not a company, or the contract
                belongs to another company.
            ValidationError: If fields are invalid or the employee does not
                match the contract.
            NotFoundError: If the contract or employee does not exist.
            ConflictError: If the contract is not signed.
        """
        require(actor, Action.MISSION_CREATE)
        fields = {name: data.get(name) for name in _RULE_FIELDS}
        validate(EntityKind.MISSION, fields, now=self.now())

        contract = await self._get_or_404(self._repos.contracts, fields["contract_id"], "Contract")
        if contract.company_id != actor.user_id:
            raise ForbiddenError("This contract belongs to another company")
        if contract.employee_id != fields["employee_id"]:
            raise ValidationError(
                message="The employee is not the one named in the contract",
                details=[{"field": "employee_id", "message": "Does not match the contract"}],
            )
        if contract.state != ContractState.SIGNED.value:
            raise ConflictError(
                "Missions can only be created under a signed contract",
                code="CONTRACT_NOT_SIGNED",
            )
        await self._get_or_404(self._repos.users, fields["employee_id"], "Employee")

        mission = await self._repos.missions.add(
            Mission(
                company_id=actor.user_id,
                status=MissionStatus.TODO.value,
                company_validation=ValidationState.PENDING.value,
                admin_validation=ValidationState.PENDING.value,
                **fields,
            )
        )
        await self._repos.commit()
        logger.info("Mission %s created for employee %s", mission.id, mission.employee_id)

        await self._dispatcher.dispatch(
            MissionCreated(
                mission_id=mission.id,
                employee_id=mission.employee_id,
                company_id=mission.company_id,
                title=mission.title,
                start_date=mission.start_date,
                end_date=mission.end_date,
            )
        )
        return mission

    async def update(
        self, actor: Actor, mission_id: uuid.UUID, data: Mapping[str, Any]
    ) -> Mission:
        """Edit mission details. Status changes go through change_status."""
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_UPDATE, mission)
        if is_terminal(LifecycleEntity.MISSION, mission.status):
            raise TerminalStatusError(LifecycleEntity.MISSION, mission.status)
        if "status" in data:
            raise ValidationError(
                message="Status cannot be changed here",
                details=[{"field": "status", "message": "Use the status endpoint"}],
            )

        proposed = {name: value for name, value in data.items() if name in EDITABLE_FIELDS}
        validate(
            EntityKind.MISSION, proposed, snapshot(mission, _RULE_FIELDS), now=self.now()
        )
        apply_changes(mission, proposed)
        return await self._repos.missions.save(mission)

    async def delete(self, actor: Actor, mission_id: uuid.UUID) -> None:
        """Delete a mission with its notifications and report.

        The report blob is removed best-effort: a failure is logged and the
        mission stays deleted.
        """
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_DELETE, mission)
        report_handle = mission.report_file_id

        removed = await self._repos.notifications.delete_for_mission(mission.id)
        await self._repos.missions.delete(mission)
        logger.info(
            "Mission %s deleted by %s (%d notifications removed)",
            mission_id,
            actor.user_id,
            removed,
        )
        if report_handle:
            try:
                await self._report_store.delete(report_handle)
            except APIError as e:
                logger.warning(
                    "Failed to delete report %s of mission %s: %s",
                    report_handle,
                    mission_id,
                    e.message,
                )

    # -----------------------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------------------

    async def change_status(
        self, actor: Actor, mission_id: uuid.UUID, status: str
    ) -> Mission:
        """Employee progress: todo -> in-progress -> done."""
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_CHANGE_STATUS, mission)
        if status not in MissionStatus.values():
            raise ValidationError(
                message="Invalid status",
                details=[{"field": "status", "message": f"Must be one of {MissionStatus.values()}"}],
            )
        return await self._transition(mission, status, ActorRole.EMPLOYEE)

    async def validate(self, actor: Actor, mission_id: uuid.UUID, action: str) -> Mission:
        """Company review of a done mission.

        ``validate`` closes the mission; ``reject`` sends it back to
        in-progress.

        Raises:
            ConflictError: If the mission is not done.
        """
        _check_review_action(action)
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_VALIDATE, mission)
        target = MissionStatus.VALIDATED if action == VALIDATE else MissionStatus.IN_PROGRESS
        if mission.status != MissionStatus.DONE.value and not is_terminal(
            LifecycleEntity.MISSION, mission.status
        ):
            raise ConflictError(
                "Only a done mission can be reviewed", code="MISSION_NOT_DONE"
            )
        return await self._transition(mission, target, ActorRole.COMPANY)

    async def admin_validate(self, actor: Actor, mission_id: uuid.UUID, action: str) -> Mission:
        """Admin review, after the company validated the mission.

        Raises:
            ConflictError: If the company has not validated the mission, or
                the admin review already happened.
        """
        _check_review_action(action)
        require(actor, Action.MISSION_ADMIN_VALIDATE)
        mission = await self._load(mission_id)
        if mission.company_validation != ValidationState.VALIDATED.value:
            raise ConflictError(
                "The company must validate the mission first",
                code="COMPANY_VALIDATION_REQUIRED",
            )
        if mission.admin_validation != ValidationState.PENDING.value:
            raise ConflictError(
                f"Mission is already {mission.admin_validation} by an admin",
                code="ALREADY_REVIEWED",
            )
        mission.admin_validation = (
            ValidationState.VALIDATED.value if action == VALIDATE else ValidationState.REJECTED.value
        )
        mission = await self._repos.missions.save(mission)
        logger.info("Mission %s admin review: %s", mission.id, mission.admin_validation)
        return mission

    async def cancel(self, actor: Actor, mission_id: uuid.UUID) -> Mission:
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_CANCEL, mission)
        role = ActorRole.COMPANY if mission.company_id == actor.user_id else ActorRole.ADMIN
        return await self._transition(mission, MissionStatus.CANCELLED, role)

    # -----------------------------------------------------------------------
    # Report and feedback
    # -----------------------------------------------------------------------

    async def submit_report(
        self,
        actor: Actor,
        mission_id: uuid.UUID,
        *,
        content: bytes,
        filename: str,
    ) -> Mission:
        """Attach the employee's PDF report, replacing any previous one.

        Existing feedback is kept. The previous blob is removed best-effort.

        Raises:
            ForbiddenError: If the actor is not the assigned employee.
            ConflictError: If the mission is not done.
            ValidationError: If the content is not a PDF.
        """
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_SUBMIT_REPORT, mission)
        if mission.status != MissionStatus.DONE.value:
            raise ConflictError("Mission must be done to submit a report", code="MISSION_NOT_DONE")
        require_pdf_signature(content)

        previous = mission.report_file_id
        mission.report_file_id = await self._report_store.put(
            content,
            content_type="application/pdf",
            filename=filename,
            metadata={"mission_id": str(mission.id), "employee_id": str(actor.user_id)},
        )
        mission.report_filename = filename
        mission.report_submitted_at = self.now()
        mission = await self._repos.missions.save(mission)
        logger.info("Report submitted for mission %s", mission.id)

        if previous:
            try:
                await self._report_store.delete(previous)
            except APIError as e:
                logger.warning("Failed to delete previous report %s: %s", previous, e.message)
        return mission

    async def get_report(self, actor: Actor, mission_id: uuid.UUID) -> StoredBlob:
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_READ, mission)
        if not mission.report_file_id:
            raise NotFoundError("Mission report")
        return await self._report_store.get(mission.report_file_id)

    async def add_feedback(
        self, actor: Actor, mission_id: uuid.UUID, content: str | None
    ) -> MissionFeedback:
        """Comment on the submitted report and notify the employee.

        Raises:
            ValidationError: If the feedback text is empty.
            ConflictError: If no report was submitted.
        """
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_FEEDBACK, mission)
        validate(EntityKind.MISSION_FEEDBACK, {"content": content})
        if not mission.report_file_id:
            raise ConflictError("No report has been submitted yet", code="REPORT_REQUIRED")

        feedback = await self._repos.missions.add_feedback(
            MissionFeedback(mission_id=mission.id, author_id=actor.user_id, content=content.strip())
        )
        await self._dispatcher.dispatch(
            MissionFeedbackAdded(
                mission_id=mission.id,
                employee_id=mission.employee_id,
                company_id=mission.company_id,
                title=mission.title,
                feedback=feedback.content,
            )
        )
        return feedback

    async def list_feedback(self, actor: Actor, mission_id: uuid.UUID) -> list[MissionFeedback]:
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_READ, mission)
        return await self._repos.missions.list_feedback(mission.id)

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    async def get(self, actor: Actor, mission_id: uuid.UUID) -> Mission:
        mission = await self._load(mission_id)
        require(actor, Action.MISSION_READ, mission)
        return mission

    async def list_for_company(
        self, actor: Actor, filters: MissionFilters, *, offset: int, limit: int
    ) -> tuple[list[Mission], int]:
        return await self._repos.missions.list_for_company(
            actor.user_id, filters, offset=offset, limit=limit
        )

    async def list_for_employee(self, actor: Actor) -> list[Mission]:
        return await self._repos.missions.list_for_employee(actor.user_id)

    async def list_for_contract(self, actor: Actor, contract_id: uuid.UUID) -> list[Mission]:
        contract = await self._get_or_404(self._repos.contracts, contract_id, "Contract")
        require(actor, Action.CONTRACT_READ, contract)
        return await self._repos.missions.list_for_contract(contract.id)
