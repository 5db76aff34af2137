from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

from src.backend.benefits.config.settings import (
    DEFAULT_ADMIN,
    BenefitsSettings,
    build_contracts,
    default_policy_path,
    load_settings,
    parse_policy,
)
from src.backend.benefits.use_cases.admin import ManualBlockHeight
from src.backend.benefits.use_cases.subsidy_calculator import CalculationParameters

_ENV_KEYS = ["BENEFITS_POLICY_PATH", "BENEFITS_ADMIN", "BENEFITS_INITIAL_BLOCK_HEIGHT"]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's local .env out of these tests.
    monkeypatch.setattr(
        "src.backend.benefits.config.settings.load_dotenv", lambda *a, **k: False
    )


def test_default_policy_file_matches_builtin_defaults() -> None:
    settings = load_settings(default_policy_path())
    assert settings.admin == DEFAULT_ADMIN
    assert settings.initial_block_height == 100
    assert settings.calculation_parameters == CalculationParameters()
    assert settings.eligibility_criteria.income_threshold == 50000
    assert settings.verification_period == 31536000
    assert settings.usage_thresholds.water_threshold == 15000


def test_parse_policy_keeps_defaults_for_missing_keys() -> None:
    settings = parse_policy({"subsidy_calculation": {"base_subsidy": 250}})
    assert settings.calculation_parameters.base_subsidy == 250
    assert settings.calculation_parameters.max_subsidy == 500
    assert settings.admin == DEFAULT_ADMIN


@pytest.mark.parametrize(
    "doc",
    [
        [],
        {"policy": "nope"},
        {"policy": {"admin": ""}},
        {"usage_monitoring": {"gas_threshold": -5}},
        {"usage_monitoring": {"gas_threshold": "100"}},
        {"recipient_verification": {"verification_period": True}},
    ],
)
def test_parse_policy_rejects_malformed_documents(doc) -> None:
    with pytest.raises(ValueError):
        parse_policy(doc)


def test_load_settings_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_load_settings_invalid_yaml(tmp_path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("policy: [unclosed\n")
    with pytest.raises(ValueError):
        load_settings(path)


def test_from_env_reads_policy_and_overrides(monkeypatch, tmp_path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        "policy:\n"
        "  admin: ADMIN-FROM-FILE\n"
        "  initial_block_height: 7\n"
        "usage_monitoring:\n"
        "  electricity_threshold: 42\n"
    )
    monkeypatch.setenv("BENEFITS_POLICY_PATH", str(path))

    settings = BenefitsSettings.from_env()
    assert settings.admin == "ADMIN-FROM-FILE"
    assert settings.initial_block_height == 7
    assert settings.usage_thresholds.electricity_threshold == 42
    assert settings.policy_path == str(path)

    monkeypatch.setenv("BENEFITS_ADMIN", "ADMIN-FROM-ENV")
    monkeypatch.setenv("BENEFITS_INITIAL_BLOCK_HEIGHT", "900")
    settings = BenefitsSettings.from_env()
    assert settings.admin == "ADMIN-FROM-ENV"
    assert settings.initial_block_height == 900
    assert settings.usage_thresholds.electricity_threshold == 42


def test_from_env_rejects_bad_height(monkeypatch) -> None:
    monkeypatch.setenv("BENEFITS_INITIAL_BLOCK_HEIGHT", "soon")
    with pytest.raises(ValueError):
        BenefitsSettings.from_env()


def test_from_env_explicit_missing_policy(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("BENEFITS_POLICY_PATH", str(tmp_path / "missing.yaml"))
    with pytest.raises(FileNotFoundError):
        BenefitsSettings.from_env()


def test_build_contracts_gives_each_contract_its_own_admin() -> None:
    contracts = build_contracts(BenefitsSettings(admin="root", initial_block_height=5))
    assert contracts.height_source.current_height() == 5

    assert contracts.subsidy_calculator.set_admin("root", "someone-else").ok is True
    assert contracts.subsidy_calculator.admin == "someone-else"
    assert contracts.recipient_registry.admin == "root"
    assert contracts.usage_monitor.admin == "root"


def test_build_contracts_shares_height_source() -> None:
    height = ManualBlockHeight(10)
    contracts = build_contracts(BenefitsSettings(), height_source=height)

    contracts.usage_monitor.record_usage(
        DEFAULT_ADMIN, "r1", 202401, electricity=1, water=1, gas=1
    )
    height.advance(3)
    contracts.recipient_registry.register_recipient(
        DEFAULT_ADMIN, "r1", income=1, household_size=1
    )

    assert contracts.usage_monitor.get_usage_record("r1", 202401).recorded_at == 10
    assert contracts.recipient_registry.get_recipient_data("r1").last_verified_at == 13


def _load_smoke_script():
    script = Path(__file__).resolve().parents[4] / "scripts" / "benefit_policy_smoke.py"
    spec = importlib.util.spec_from_file_location("benefit_policy_smoke", script)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_policy_smoke_script(tmp_path, capsys) -> None:
    smoke = _load_smoke_script()

    assert smoke.main([str(default_policy_path())]) == 0
    assert "Policy parsed" in capsys.readouterr().out

    bad = tmp_path / "bad.yaml"
    bad.write_text("policy:\n  id: x\n  version: 1\n  admin: A\n")
    assert smoke.main([str(bad)]) == 1
    assert "Missing policy keys" in capsys.readouterr().err
