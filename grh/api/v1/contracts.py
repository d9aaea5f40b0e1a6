"""Contracts API router.

Endpoints:
- POST /contracts - draft a contract (admin)
- GET /contracts/mine - contracts where the actor is employee or company
- /contracts/{id} - read, publish, sign, reject
"""

import uuid
from typing import Any

from fastapi import APIRouter

from grh.api.deps import Contracts, CurrentActor
from grh.core.responses import DataResponse, ListResponse, single_page
from grh.models import Contract
from grh.schemas import CreateContractRequest

router = APIRouter()


def _contract_to_dict(contract: Contract) -> dict[str, Any]:
    return {
        "id": contract.id,
        "title": contract.title,
        "employee_id": contract.employee_id,
        "company_id": contract.company_id,
        "interview_id": contract.interview_id,
        "offer_id": contract.offer_id,
        "contract_type": contract.contract_type,
        "position": contract.position,
        "start_date": contract.start_date,
        "end_date": contract.end_date,
        "salary": contract.salary,
        "state": contract.state,
        "created_at": contract.created_at,
    }


@router.post("", status_code=201)
async def create_contract(
    body: CreateContractRequest, actor: CurrentActor, service: Contracts
) -> DataResponse[dict]:
    contract = await service.create(actor, body.model_dump(exclude_unset=True))
    return DataResponse(message="Contract drafted", data=_contract_to_dict(contract))


@router.get("/mine")
async def list_my_contracts(actor: CurrentActor, service: Contracts) -> ListResponse[dict]:
    return single_page([_contract_to_dict(c) for c in await service.list_mine(actor)])


@router.get("/{contract_id}")
async def get_contract(
    contract_id: uuid.UUID, actor: CurrentActor, service: Contracts
) -> DataResponse[dict]:
    return DataResponse(data=_contract_to_dict(await service.get(actor, contract_id)))


@router.put("/{contract_id}/publish")
async def publish_contract(
    contract_id: uuid.UUID, actor: CurrentActor, service: Contracts
) -> DataResponse[dict]:
    contract = await service.publish(actor, contract_id)
    return DataResponse(message="Contract published", data=_contract_to_dict(contract))


@router.put("/{contract_id}/sign")
async def sign_contract(
    contract_id: uuid.UUID, actor: CurrentActor, service: Contracts
) -> DataResponse[dict]:
    contract = await service.sign(actor, contract_id)
    return DataResponse(message="Contract signed", data=_contract_to_dict(contract))


@router.put("/{contract_id}/reject")
async def reject_contract(
    contract_id: uuid.UUID, actor: CurrentActor, service: Contracts
) -> DataResponse[dict]:
    contract = await service.reject(actor, contract_id)
    return DataResponse(message="Contract rejected", data=_contract_to_dict(contract))
