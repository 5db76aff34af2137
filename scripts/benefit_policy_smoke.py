"""Smoke test: validate a benefit policy YAML file.

This is intentionally lightweight and does NOT start the API.
It catches common issues (missing sections, negative or non-integer values)
so you can iterate on the policy quickly.

Run:
  python scripts/benefit_policy_smoke.py [path]

Optional env vars:
  BENEFITS_POLICY_PATH  (default: data/benefit_policies/default_policy.yaml)
"""

from __future__ import annotations

import os
import sys

from dotenv import load_dotenv

# Allow running as: `python scripts/benefit_policy_smoke.py`
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

load_dotenv(override=False)

REQUIRED_SECTIONS = {
    "subsidy_calculation": ["base_subsidy", "income_factor", "household_bonus", "max_subsidy"],
    "recipient_verification": ["income_threshold", "household_multiplier", "verification_period"],
    "usage_monitoring": ["electricity_threshold", "water_threshold", "gas_threshold"],
}


def _fail(msg: str) -> int:
    print(f"ERROR: {msg}", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    import yaml

    from src.backend.benefits.config.settings import parse_policy

    argv = sys.argv[1:] if argv is None else argv
    path = argv[0] if argv else os.environ.get(
        "BENEFITS_POLICY_PATH",
        os.path.join(_REPO_ROOT, "data", "benefit_policies", "default_policy.yaml"),
    )
    if not os.path.isabs(path):
        path = os.path.join(_REPO_ROOT, path)

    if not os.path.exists(path):
        return _fail(f"Policy file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            doc = yaml.safe_load(f)
        except yaml.YAMLError as e:
            return _fail(f"Invalid YAML: {e}")

    if not isinstance(doc, dict):
        return _fail("Policy YAML must parse to a mapping (dict).")

    policy = doc.get("policy")
    if not isinstance(policy, dict):
        return _fail("Missing or invalid top-level key: policy")
    for key in ["id", "version", "admin"]:
        if not policy.get(key):
            return _fail(f"policy.{key} is required")

    missing: list[str] = []
    for section, keys in REQUIRED_SECTIONS.items():
        sec = doc.get(section)
        if not isinstance(sec, dict):
            missing.append(section)
            continue
        missing.extend(f"{section}.{k}" for k in keys if k not in sec)
    if missing:
        return _fail(f"Missing policy keys: {missing}")

    try:
        settings = parse_policy(doc, policy_path=path)
    except ValueError as e:
        return _fail(str(e))

    print("✅ Policy parsed")
    print(f"- Path: {path}")
    print(f"- Policy ID: {policy.get('id')}")
    print(f"- Version: {policy.get('version')}")
    print(f"- Admin: {settings.admin}")
    print(f"- Initial block height: {settings.initial_block_height}")
    print(f"- Calculation parameters: {settings.calculation_parameters.to_dict()}")
    print(f"- Eligibility criteria: {settings.eligibility_criteria.to_dict()}")
    print(f"- Verification period: {settings.verification_period}")
    print(f"- Usage thresholds: {settings.usage_thresholds.to_dict()}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
