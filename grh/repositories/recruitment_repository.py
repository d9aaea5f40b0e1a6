"""Repositories for the recruitment pipeline.

Offers, applications, interviews and contracts: the path from a company
offer (or a candidate posting) to a signed contract.
"""

import uuid

from sqlalchemy import or_, select

from grh.models import Application, Contract, Interview, JobOffer
from grh.models.enums import InterviewOutcome, InterviewStatus, OfferStatus
from grh.repositories.base import SqlRepository


class JobOfferRepository(SqlRepository[JobOffer]):
    model = JobOffer

    async def list_open(self, *, offset: int, limit: int) -> tuple[list[JobOffer], int]:
        stmt = (
            select(JobOffer)
            .where(JobOffer.status == OfferStatus.OPEN.value)
            .order_by(JobOffer.created_at.desc())
        )
        return await self._page(stmt, offset=offset, limit=limit)

    async def list_for_company(self, company_id: uuid.UUID) -> list[JobOffer]:
        return await self._scalars(
            select(JobOffer)
            .where(JobOffer.company_id == company_id)
            .order_by(JobOffer.created_at.desc())
        )


class ApplicationRepository(SqlRepository[Application]):
    model = Application

    async def get_for_offer_and_candidate(
        self, offer_id: uuid.UUID, candidate_id: uuid.UUID
    ) -> Application | None:
        result = await self.db.execute(
            select(Application).where(
                Application.offer_id == offer_id,
                Application.candidate_id == candidate_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_candidate(self, candidate_id: uuid.UUID) -> list[Application]:
        return await self._scalars(
            select(Application)
            .where(Application.candidate_id == candidate_id)
            .order_by(Application.created_at.desc())
        )

    async def list_for_offer(self, offer_id: uuid.UUID) -> list[Application]:
        return await self._scalars(
            select(Application)
            .where(Application.offer_id == offer_id)
            .order_by(Application.created_at.desc())
        )


class InterviewRepository(SqlRepository[Interview]):
    model = Interview

    async def list_for_company(self, company_id: uuid.UUID) -> list[Interview]:
        return await self._scalars(
            select(Interview)
            .where(Interview.company_id == company_id)
            .order_by(Interview.scheduled_at.desc())
        )

    async def list_positive(self, kind: str | None = None) -> list[Interview]:
        """Completed interviews with a positive outcome, optionally by kind."""
        stmt = select(Interview).where(
            Interview.status == InterviewStatus.COMPLETED.value,
            Interview.outcome == InterviewOutcome.POSITIVE.value,
        )
        if kind:
            stmt = stmt.where(Interview.kind == kind)
        return await self._scalars(stmt.order_by(Interview.updated_at.desc()))

    async def get_for_application(self, application_id: uuid.UUID) -> Interview | None:
        result = await self.db.execute(
            select(Interview)
            .where(Interview.related_application_id == application_id)
            .order_by(Interview.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_scheduled_for_posting(self, posting_id: uuid.UUID) -> Interview | None:
        result = await self.db.execute(
            select(Interview)
            .where(
                Interview.related_posting_id == posting_id,
                Interview.status == InterviewStatus.SCHEDULED.value,
            )
            .order_by(Interview.scheduled_at)
            .limit(1)
        )
        return result.scalar_one_or_none()


class ContractRepository(SqlRepository[Contract]):
    model = Contract

    async def list_for_user(self, user_id: uuid.UUID) -> list[Contract]:
        """Contracts where the user is the employee or the company."""
        return await self._scalars(
            select(Contract)
            .where(or_(Contract.employee_id == user_id, Contract.company_id == user_id))
            .order_by(Contract.created_at.desc())
        )
