"""Subsidy Calculation API Router."""

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from src.backend.benefits.api.dependencies import get_caller, get_contracts, raise_for_error
from src.backend.benefits.config.settings import BenefitContracts

logger = logging.getLogger(__name__)

subsidy_router = APIRouter(prefix="/subsidy", tags=["Subsidy Calculation"])


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------


class CalculationParametersRequest(BaseModel):
    base_subsidy: int = Field(ge=0)
    income_factor: int = Field(ge=0)
    household_bonus: int = Field(ge=0)
    max_subsidy: int = Field(ge=0)


class SetAdminRequest(BaseModel):
    new_admin: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@subsidy_router.get("/calculate")
def calculate_subsidy(
    income: int = Query(ge=0),
    household_size: int = Query(ge=0),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        subsidy = contracts.subsidy_calculator.calculate_subsidy(income, household_size)
    return {"income": income, "household_size": household_size, "subsidy": subsidy}


@subsidy_router.get("/parameters")
def get_calculation_parameters(contracts: BenefitContracts = Depends(get_contracts)):
    with contracts.lock:
        return contracts.subsidy_calculator.get_calculation_parameters().to_dict()


@subsidy_router.put("/parameters")
def update_calculation_parameters(
    body: CalculationParametersRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.subsidy_calculator.update_calculation_parameters(
            caller,
            base_subsidy=body.base_subsidy,
            income_factor=body.income_factor,
            household_bonus=body.household_bonus,
            max_subsidy=body.max_subsidy,
        )
    raise_for_error(result)
    return result.to_dict()


@subsidy_router.put("/admin")
def set_admin(
    body: SetAdminRequest,
    caller: str = Depends(get_caller),
    contracts: BenefitContracts = Depends(get_contracts),
):
    with contracts.lock:
        result = contracts.subsidy_calculator.set_admin(caller, body.new_admin)
    raise_for_error(result)
    return result.to_dict()
