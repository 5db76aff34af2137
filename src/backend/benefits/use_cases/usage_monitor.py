"""Utility usage monitoring.

Usage is recorded once per (recipient, period) and may be corrected with
`update_usage`. Excess flags are computed on every check against the current
thresholds; a value equal to its threshold is not excessive.
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


@dataclass(frozen=True, slots=True)
class UsageKey:
    recipient: str
    period: int


@dataclass(frozen=True, slots=True)
class UsageRecord:
    electricity_usage: int
    water_usage: int
    gas_usage: int
    recorded_at: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class UsageThresholds:
    electricity_threshold: int = 500
    water_threshold: int = 15_000
    gas_threshold: int = 100

    def __post_init__(self) -> None:
        require_unsigned(**asdict(self))

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ExcessiveUsage:
    excessive_electricity: bool
    excessive_water: bool
    excessive_gas: bool

    @property
    def any_excessive(self) -> bool:
        return self.excessive_electricity or self.excessive_water or self.excessive_gas

    def to_dict(self) -> dict[str, bool]:
        return asdict(self)


def evaluate_usage(record: UsageRecord, thresholds: UsageThresholds) -> ExcessiveUsage:
    return ExcessiveUsage(
        excessive_electricity=record.electricity_usage > thresholds.electricity_threshold,
        excessive_water=record.water_usage > thresholds.water_threshold,
        excessive_gas=record.gas_usage > thresholds.gas_threshold,
    )


class UsageMonitor:
    def __init__(
        self,
        *,
        admin: AdminContext,
        height_source: BlockHeightSource,
        thresholds: UsageThresholds | None = None,
    ) -> None:
        self._admin = admin
        self._height = height_source
        self._thresholds = thresholds or UsageThresholds()
        self._records: dict[UsageKey, UsageRecord] = {}

    @property
    def admin(self) -> str:
        return self._admin.admin

    def _make_record(self, electricity: int, water: int, gas: int) -> UsageRecord:
        require_unsigned(electricity=electricity, water=water, gas=gas)
        return UsageRecord(
            electricity_usage=electricity,
            water_usage=water,
            gas_usage=gas,
            recorded_at=self._height.current_height(),
        )

    def record_usage(
        self,
        caller: str,
        identity: str,
        period: int,
        *,
        electricity: int,
        water: int,
        gas: int,
    ) -> ContractResult[bool]:
        record = self._make_record(electricity, water, gas)
        if not self._admin.is_admin(caller):
            logger.warning("Usage recording rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)

        key = UsageKey(recipient=identity, period=period)
        if key in self._records:
            return ContractResult.failure(ContractError.DUPLICATE)

        self._records[key] = record
        logger.info("Usage recorded: %s period=%s", identity, period)
        return ContractResult.success()

    def update_usage(
        self,
        caller: str,
        identity: str,
        period: int,
        *,
        electricity: int,
        water: int,
        gas: int,
    ) -> ContractResult[bool]:
        record = self._make_record(electricity, water, gas)
        if not self._admin.is_admin(caller):
            logger.warning("Usage update rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)

        key = UsageKey(recipient=identity, period=period)
        if key not in self._records:
            return ContractResult.failure(ContractError.NOT_FOUND)

        self._records[key] = record
        logger.info("Usage updated: %s period=%s", identity, period)
        return ContractResult.success()

    def check_excessive_usage(self, identity: str, period: int) -> ContractResult[ExcessiveUsage]:
        record = self._records.get(UsageKey(recipient=identity, period=period))
        if record is None:
            return ContractResult.failure(ContractError.NOT_FOUND)
        return ContractResult.success(evaluate_usage(record, self._thresholds))

    def update_thresholds(
        self, caller: str, *, electricity: int, water: int, gas: int
    ) -> ContractResult[bool]:
        if not self._admin.is_admin(caller):
            logger.warning("Threshold update rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)

        thresholds = UsageThresholds(
            electricity_threshold=electricity,
            water_threshold=water,
            gas_threshold=gas,
        )
        self._thresholds = thresholds
        logger.info("Usage thresholds updated: %s", thresholds.to_dict())
        return ContractResult.success()

    def get_thresholds(self) -> UsageThresholds:
        return self._thresholds

    def get_usage_record(self, identity: str, period: int) -> UsageRecord | None:
        return self._records.get(UsageKey(recipient=identity, period=period))

    def set_admin(self, caller: str, new_admin: str) -> ContractResult[bool]:
        return self._admin.transfer(caller, new_admin)
