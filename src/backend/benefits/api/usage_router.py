"""Usage Monitoring API Router."""

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

usage_router = APIRouter(prefix="/usage", tags=["Usage Monitoring"])


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------


class UsageAmounts(BaseModel):
    electricity: int = Field(ge=0)
    water: int = Field(ge=0)
    gas: int = Field(ge=0)


class RecordUsageRequest(UsageAmounts):
    identity: str = Field(min_length=1)
    period: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@usage_router.post("/records", status_code=201)
def record_usage(
    body: RecordUsageRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.usage_monitor.record_usage(
            caller,
            body.identity,
            body.period,
            electricity=body.electricity,
            water=body.water,
            gas=body.gas,
        )
    raise_for_error(result)
    return result.to_dict()


@usage_router.get("/records/{identity}/{period}")
def get_usage_record(
    identity: str, period: int, contracts: BenefitContracts = Depends(get_contracts)
):
    with contracts.lock:
        record = contracts.usage_monitor.get_usage_record(identity, period)
    if record is None:
        raise not_found()
    return record.to_dict()


@usage_router.put("/records/{identity}/{period}")
def update_usage(
    identity: str,
    period: int,
    body: UsageAmounts,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.usage_monitor.update_usage(
            caller,
            identity,
            period,
            electricity=body.electricity,
            water=body.water,
            gas=body.gas,
        )
    raise_for_error(result)
    return result.to_dict()


@usage_router.get("/records/{identity}/{period}/excessive")
def check_excessive_usage(
    identity: str, period: int, contracts: BenefitContracts = Depends(get_contracts)
):
    with contracts.lock:
        result = contracts.usage_monitor.check_excessive_usage(identity, period)
    raise_for_error(result)
    return {"identity": identity, "period": period, **result.value.to_dict()}


@usage_router.get("/thresholds")
def get_thresholds(contracts: BenefitContracts = Depends(get_contracts)):
    with contracts.lock:
        return contracts.usage_monitor.get_thresholds().to_dict()


@usage_router.put("/thresholds")
def update_thresholds(
    body: UsageAmounts,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.usage_monitor.update_thresholds(
            caller, electricity=body.electricity, water=body.water, gas=body.gas
        )
    raise_for_error(result)
    return result.to_dict()


@usage_router.put("/admin")
def set_admin(
    body: SetAdminRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.usage_monitor.set_admin(caller, body.new_admin)
    raise_for_error(result)
    return result.to_dict()
