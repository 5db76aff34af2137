"""Recipient Verification API Router.

Registration, re-verification and removal of recipients, plus the
eligibility criteria they are checked against.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.backend.benefits.api.dependencies import (
    get_caller,
    get_contracts,
    not_found,
    raise_for_error,
)
from src.backend.benefits.api.subsidy_router import SetAdminRequest
from src.backend.benefits.config.settings import BenefitContracts

logger = logging.getLogger(__name__)

recipient_router = APIRouter(tags=["Recipient Verification"])


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------


class RegisterRecipientRequest(BaseModel):
    identity: str = Field(min_length=1)
    income: int = Field(ge=0)
    household_size: int = Field(ge=0)


class UpdateRecipientRequest(BaseModel):
    income: int = Field(ge=0)
    household_size: int = Field(ge=0)


class EligibilityCriteriaRequest(BaseModel):
    income_threshold: int = Field(ge=0)
    household_multiplier: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@recipient_router.post("/recipients", status_code=201)
def register_recipient(
    body: RegisterRecipientRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.recipient_registry.register_recipient(
            caller, body.identity, income=body.income, household_size=body.household_size
        )
    raise_for_error(result)
    return result.to_dict()


@recipient_router.get("/recipients/{identity}")
def get_recipient_data(identity: str, contracts: BenefitContracts = Depends(get_contracts)):
    with contracts.lock:
        record = contracts.recipient_registry.get_recipient_data(identity)
    if record is None:
        raise not_found()
    return record.to_dict()


@recipient_router.put("/recipients/{identity}")
def update_recipient(
    identity: str,
    body: UpdateRecipientRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.recipient_registry.update_recipient(
            caller, identity, income=body.income, household_size=body.household_size
        )
    raise_for_error(result)
    return result.to_dict()


@recipient_router.delete("/recipients/{identity}")
def remove_recipient(
    identity: str,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.recipient_registry.remove_recipient(caller, identity)
    raise_for_error(result)
    return result.to_dict()


@recipient_router.get("/recipients/{identity}/eligibility")
def is_recipient_eligible(identity: str, contracts: BenefitContracts = Depends(get_contracts)):
    with contracts.lock:
        result = contracts.recipient_registry.is_recipient_eligible(identity)
    raise_for_error(result)
    return {"identity": identity, "is_eligible": result.value}


@recipient_router.get("/eligibility/criteria")
def get_eligibility_criteria(contracts: BenefitContracts = Depends(get_contracts)):
    with contracts.lock:
        registry = contracts.recipient_registry
        return {
            **registry.get_eligibility_criteria().to_dict(),
            "verification_period": registry.verification_period,
        }


@recipient_router.put("/eligibility/criteria")
def update_eligibility_criteria(
    body: EligibilityCriteriaRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.recipient_registry.update_eligibility_criteria(
            caller,
            income_threshold=body.income_threshold,
            household_multiplier=body.household_multiplier,
        )
    raise_for_error(result)
    return result.to_dict()


@recipient_router.put("/eligibility/admin")
def set_admin(
    body: SetAdminRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.recipient_registry.set_admin(caller, body.new_admin)
    raise_for_error(result)
    return result.to_dict()
