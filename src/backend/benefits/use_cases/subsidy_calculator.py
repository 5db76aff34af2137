"""Subsidy calculation.

The subsidy starts at a base amount, drops with income (scaled by
`income_factor` per 10,000 of income) and grows with household size. The
result is capped at `max_subsidy` and never negative.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from src.backend.benefits.use_cases.admin import AdminContext
from src.backend.benefits.use_cases.contract_results import (
    ContractError,
    ContractResult,
    require_unsigned,
)

logger = logging.getLogger(__name__)

INCOME_FACTOR_SCALE = 10_000


@dataclass(frozen=True, slots=True)
class CalculationParameters:
    base_subsidy: int = 100
    income_factor: int = 10
    household_bonus: int = 25
    max_subsidy: int = 500

    def __post_init__(self) -> None:
        require_unsigned(**asdict(self))

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def compute_subsidy(params: CalculationParameters, income: int, household_size: int) -> int:
    require_unsigned(income=income, household_size=household_size)

    income_reduction = (income * params.income_factor) // INCOME_FACTOR_SCALE
    household_addition = household_size * params.household_bonus
    adjusted = params.base_subsidy - income_reduction + household_addition

    if adjusted > params.max_subsidy:
        adjusted = params.max_subsidy
    if adjusted < 0:
        adjusted = 0
    return adjusted


class SubsidyCalculator:
    def __init__(
        self, *, admin: AdminContext, parameters: CalculationParameters | None = None
    ) -> None:
        self._admin = admin
        self._params = parameters or CalculationParameters()

    @property
    def admin(self) -> str:
        return self._admin.admin

    def calculate_subsidy(self, income: int, household_size: int) -> int:
        return compute_subsidy(self._params, income, household_size)

    def update_calculation_parameters(
        self,
        caller: str,
        *,
        base_subsidy: int,
        income_factor: int,
        household_bonus: int,
        max_subsidy: int,
    ) -> ContractResult[bool]:
        if not self._admin.is_admin(caller):
            logger.warning("Calculation parameter update rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)

        # Built first so a validation error leaves the old parameters in place.
        params = CalculationParameters(
            base_subsidy=base_subsidy,
            income_factor=income_factor,
            household_bonus=household_bonus,
            max_subsidy=max_subsidy,
        )
        self._params = params
        logger.info("Calculation parameters updated: %s", params.to_dict())
        return ContractResult.success()

    def get_calculation_parameters(self) -> CalculationParameters:
        return self._params

    def set_admin(self, caller: str, new_admin: str) -> ContractResult[bool]:
        return self._admin.transfer(caller, new_admin)
