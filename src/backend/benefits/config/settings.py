"""
Configuration settings for the benefit rules backend.
Loads the YAML policy file, applies environment overrides and wires the contracts.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from src.backend.benefits.use_cases.admin import (
    AdminContext,
    BlockHeightSource,
    ManualBlockHeight,
)
from src.backend.benefits.use_cases.recipient_registry import (
    DEFAULT_VERIFICATION_PERIOD,
    EligibilityCriteria,
    RecipientRegistry,
)
from src.backend.benefits.use_cases.subsidy_calculator import (
    CalculationParameters,
    SubsidyCalculator,
)
from src.backend.benefits.use_cases.usage_monitor import UsageMonitor, UsageThresholds

logger = logging.getLogger(__name__)

DEFAULT_ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
DEFAULT_INITIAL_BLOCK_HEIGHT = 100


def repo_root() -> Path:
    """settings.py lives at src/backend/benefits/config/settings.py."""
    return Path(__file__).resolve().parents[4]


def default_policy_path() -> Path:
    return repo_root() / "data" / "benefit_policies" / "default_policy.yaml"


@dataclass(frozen=True, slots=True)
class BenefitsSettings:
    admin: str = DEFAULT_ADMIN
    initial_block_height: int = DEFAULT_INITIAL_BLOCK_HEIGHT
    calculation_parameters: CalculationParameters = field(default_factory=CalculationParameters)
    eligibility_criteria: EligibilityCriteria = field(default_factory=EligibilityCriteria)
    verification_period: int = DEFAULT_VERIFICATION_PERIOD
    usage_thresholds: UsageThresholds = field(default_factory=UsageThresholds)
    policy_path: str | None = None

    @classmethod
    def from_env(cls) -> "BenefitsSettings":
        load_dotenv(override=False)

        raw_path = (os.environ.get("BENEFITS_POLICY_PATH") or "").strip()
        if raw_path:
            path = Path(raw_path)
            if not path.is_absolute():
                path = (repo_root() / path).resolve()
            settings = load_settings(path)
        elif default_policy_path().exists():
            settings = load_settings(default_policy_path())
        else:
            logger.warning("No policy file found, using built-in defaults")
            settings = cls()

        overrides: dict[str, Any] = {}
        admin = (os.environ.get("BENEFITS_ADMIN") or "").strip()
        if admin:
            overrides["admin"] = admin
        height = (os.environ.get("BENEFITS_INITIAL_BLOCK_HEIGHT") or "").strip()
        if height:
            try:
                overrides["initial_block_height"] = int(height)
            except ValueError:
                raise ValueError(
                    f"BENEFITS_INITIAL_BLOCK_HEIGHT must be an integer, got {height!r}"
                )
            if overrides["initial_block_height"] < 0:
                raise ValueError("BENEFITS_INITIAL_BLOCK_HEIGHT must be >= 0")

        if not overrides:
            return settings
        return cls(
            admin=overrides.get("admin", settings.admin),
            initial_block_height=overrides.get(
                "initial_block_height", settings.initial_block_height
            ),
            calculation_parameters=settings.calculation_parameters,
            eligibility_criteria=settings.eligibility_criteria,
            verification_period=settings.verification_period,
            usage_thresholds=settings.usage_thresholds,
            policy_path=settings.policy_path,
        )


def _section(doc: dict[str, Any], name: str) -> dict[str, Any]:
    sec = doc.get(name)
    if sec is None:
        return {}
    if not isinstance(sec, dict):
        raise ValueError(f"Policy section '{name}' must be a mapping")
    return sec


def _unsigned(sec: dict[str, Any], section_name: str, key: str, default: int) -> int:
    value = sec.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{section_name}.{key} must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{section_name}.{key} must be >= 0, got {value}")
    return value


def parse_policy(doc: dict[str, Any], *, policy_path: str | None = None) -> BenefitsSettings:
    """Build settings from a parsed policy document. Missing keys keep their defaults."""

    if not isinstance(doc, dict):
        raise ValueError("Policy YAML must parse to a mapping (dict)")

    policy = _section(doc, "policy")
    subsidy = _section(doc, "subsidy_calculation")
    verification = _section(doc, "recipient_verification")
    usage = _section(doc, "usage_monitoring")

    defaults = BenefitsSettings()
    admin = policy.get("admin", defaults.admin)
    if not isinstance(admin, str) or not admin.strip():
        raise ValueError("policy.admin must be a non-empty string")

    base = CalculationParameters()
    criteria = EligibilityCriteria()
    thresholds = UsageThresholds()

    return BenefitsSettings(
        admin=admin.strip(),
        initial_block_height=_unsigned(
            policy, "policy", "initial_block_height", defaults.initial_block_height
        ),
        calculation_parameters=CalculationParameters(
            base_subsidy=_unsigned(subsidy, "subsidy_calculation", "base_subsidy", base.base_subsidy),
            income_factor=_unsigned(subsidy, "subsidy_calculation", "income_factor", base.income_factor),
            household_bonus=_unsigned(
                subsidy, "subsidy_calculation", "household_bonus", base.household_bonus
            ),
            max_subsidy=_unsigned(subsidy, "subsidy_calculation", "max_subsidy", base.max_subsidy),
        ),
        eligibility_criteria=EligibilityCriteria(
            income_threshold=_unsigned(
                verification, "recipient_verification", "income_threshold", criteria.income_threshold
            ),
            household_multiplier=_unsigned(
                verification,
                "recipient_verification",
                "household_multiplier",
                criteria.household_multiplier,
            ),
        ),
        verification_period=_unsigned(
            verification, "recipient_verification", "verification_period", DEFAULT_VERIFICATION_PERIOD
        ),
        usage_thresholds=UsageThresholds(
            electricity_threshold=_unsigned(
                usage, "usage_monitoring", "electricity_threshold", thresholds.electricity_threshold
            ),
            water_threshold=_unsigned(
                usage, "usage_monitoring", "water_threshold", thresholds.water_threshold
            ),
            gas_threshold=_unsigned(usage, "usage_monitoring", "gas_threshold", thresholds.gas_threshold),
        ),
        policy_path=policy_path,
    )


def load_settings(path: Path) -> BenefitsSettings:
    """Load and parse a benefit policy YAML file."""
    if not path.exists():
        raise FileNotFoundError(f"Policy file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            doc = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse policy YAML {path}: {e}")
    settings = parse_policy(doc, policy_path=str(path))
    logger.info("Loaded benefit policy from %s", path)
    return settings


class BenefitContracts:
    """The three contracts plus the height source they share.

    `lock` serializes every state-touching request coming through the API.
    """

    def __init__(
        self,
        *,
        subsidy_calculator: SubsidyCalculator,
        recipient_registry: RecipientRegistry,
        usage_monitor: UsageMonitor,
        height_source: BlockHeightSource,
    ) -> None:
        self.subsidy_calculator = subsidy_calculator
        self.recipient_registry = recipient_registry
        self.usage_monitor = usage_monitor
        self.height_source = height_source
        self.lock = threading.Lock()


def build_contracts(
    settings: BenefitsSettings, height_source: BlockHeightSource | None = None
) -> BenefitContracts:
    """Wire fresh contract state. Each contract gets its own admin."""

    height = height_source or ManualBlockHeight(settings.initial_block_height)
    return BenefitContracts(
        subsidy_calculator=SubsidyCalculator(
            admin=AdminContext(settings.admin),
            parameters=settings.calculation_parameters,
        ),
        recipient_registry=RecipientRegistry(
            admin=AdminContext(settings.admin),
            height_source=height,
            criteria=settings.eligibility_criteria,
            verification_period=settings.verification_period,
        ),
        usage_monitor=UsageMonitor(
            admin=AdminContext(settings.admin),
            height_source=height,
            thresholds=settings.usage_thresholds,
        ),
        height_source=height,
    )
