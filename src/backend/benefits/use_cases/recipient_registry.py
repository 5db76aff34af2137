"""Recipient eligibility registry.

Eligibility is decided when a recipient is registered or updated and stored
with the block height of that verification. A stored decision stays usable for
`verification_period` blocks; after that the recipient must be re-verified
through `update_recipient`.

Changing the eligibility criteria does not touch records that already exist.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from src.backend.benefits.use_cases.admin import AdminContext, BlockHeightSource
from src.backend.benefits.use_cases.contract_results import (
    ContractError,
    ContractResult,
    require_unsigned,
)

logger = logging.getLogger(__name__)

DEFAULT_VERIFICATION_PERIOD = 31_536_000


@dataclass(frozen=True, slots=True)
class EligibilityCriteria:
    income_threshold: int = 50_000
    household_multiplier: int = 10_000

    def __post_init__(self) -> None:
        require_unsigned(**asdict(self))

    def income_limit(self, household_size: int) -> int:
        return self.income_threshold + household_size * self.household_multiplier

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class RecipientRecord:
    is_eligible: bool
    income_level: int
    household_size: int
    last_verified_at: int

    def to_dict(self) -> dict:
        return asdict(self)


def determine_eligibility(criteria: EligibilityCriteria, income: int, household_size: int) -> bool:
    return income <= criteria.income_limit(household_size)


class RecipientRegistry:
    def __init__(
        self,
        *,
        admin: AdminContext,
        height_source: BlockHeightSource,
        criteria: EligibilityCriteria | None = None,
        verification_period: int = DEFAULT_VERIFICATION_PERIOD,
    ) -> None:
        require_unsigned(verification_period=verification_period)
        self._admin = admin
        self._height = height_source
        self._criteria = criteria or EligibilityCriteria()
        self._verification_period = verification_period
        self._recipients: dict[str, RecipientRecord] = {}

    @property
    def admin(self) -> str:
        return self._admin.admin

    @property
    def verification_period(self) -> int:
        return self._verification_period

    def _verify(self, income: int, household_size: int) -> RecipientRecord:
        return RecipientRecord(
            is_eligible=determine_eligibility(self._criteria, income, household_size),
            income_level=income,
            household_size=household_size,
            last_verified_at=self._height.current_height(),
        )

    def register_recipient(
        self, caller: str, identity: str, *, income: int, household_size: int
    ) -> ContractResult[bool]:
        require_unsigned(income=income, household_size=household_size)
        if not self._admin.is_admin(caller):
            logger.warning("Recipient registration rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)
        if identity in self._recipients:
            return ContractResult.failure(ContractError.DUPLICATE)

        record = self._verify(income, household_size)
        self._recipients[identity] = record
        logger.info(
            "Recipient registered: %s (eligible=%s, height=%s)",
            identity,
            record.is_eligible,
            record.last_verified_at,
        )
        return ContractResult.success()

    def update_recipient(
        self, caller: str, identity: str, *, income: int, household_size: int
    ) -> ContractResult[bool]:
        require_unsigned(income=income, household_size=household_size)
        if not self._admin.is_admin(caller):
            logger.warning("Recipient update rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)
        if identity not in self._recipients:
            return ContractResult.failure(ContractError.NOT_FOUND)

        record = self._verify(income, household_size)
        self._recipients[identity] = record
        logger.info("Recipient re-verified: %s (eligible=%s)", identity, record.is_eligible)
        return ContractResult.success()

    def remove_recipient(self, caller: str, identity: str) -> ContractResult[bool]:
        if not self._admin.is_admin(caller):
            logger.warning("Recipient removal rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)
        if identity not in self._recipients:
            return ContractResult.failure(ContractError.NOT_FOUND)

        del self._recipients[identity]
        logger.info("Recipient removed: %s", identity)
        return ContractResult.success()

    def is_recipient_eligible(self, identity: str) -> ContractResult[bool]:
        """Return the stored eligibility flag while its verification is still valid."""

        record = self._recipients.get(identity)
        if record is None:
            return ContractResult.failure(ContractError.NOT_FOUND)

        age = self._height.current_height() - record.last_verified_at
        if age >= self._verification_period:
            return ContractResult.failure(ContractError.VERIFICATION_EXPIRED)
        return ContractResult.success(record.is_eligible)

    def update_eligibility_criteria(
        self, caller: str, *, income_threshold: int, household_multiplier: int
    ) -> ContractResult[bool]:
        if not self._admin.is_admin(caller):
            logger.warning("Eligibility criteria update rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)

        criteria = EligibilityCriteria(
            income_threshold=income_threshold,
            household_multiplier=household_multiplier,
        )
        self._criteria = criteria
        logger.info("Eligibility criteria updated: %s", criteria.to_dict())
        return ContractResult.success()

    def get_eligibility_criteria(self) -> EligibilityCriteria:
        return self._criteria

    def get_recipient_data(self, identity: str) -> RecipientRecord | None:
        return self._recipients.get(identity)

    def set_admin(self, caller: str, new_admin: str) -> ContractResult[bool]:
        return self._admin.transfer(caller, new_admin)
