from __future__ import annotations

import pytest

from src.backend.benefits.use_cases.admin import AdminContext, ManualBlockHeight
from src.backend.benefits.use_cases.contract_results import ContractError
from src.backend.benefits.use_cases.recipient_registry import (
    DEFAULT_VERIFICATION_PERIOD,
    EligibilityCriteria,
    RecipientRecord,
    RecipientRegistry,
)

ADMIN = "ST1PQHQKV0RJXZFY1DGX8MNSNYVE3VGZJSRTPGZGM"
ALICE = "ST2CY5V39NHDPWSXMW9QDT3HC3GD6Q6XX4CFRK9AG"
BOB = "ST3NBRSFKX28FQ2ZJ1MAKX58HKHSDGNV5YC7WF3G8"


@pytest.fixture
def height() -> ManualBlockHeight:
    return ManualBlockHeight(100)


@pytest.fixture
def registry(height) -> RecipientRegistry:
    return RecipientRegistry(admin=AdminContext(ADMIN), height_source=height)


def test_register_recipient(registry) -> None:
    res = registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)
    assert res.ok is True

    data = registry.get_recipient_data(ALICE)
    assert data == RecipientRecord(
        is_eligible=True, income_level=40000, household_size=3, last_verified_at=100
    )


def test_register_recipient_requires_admin(registry) -> None:
    res = registry.register_recipient(ALICE, BOB, income=40000, household_size=3)
    assert res.error == ContractError.NOT_ADMIN
    assert registry.get_recipient_data(BOB) is None


def test_register_recipient_twice_keeps_first_record(registry) -> None:
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)
    res = registry.register_recipient(ADMIN, ALICE, income=45000, household_size=2)

    assert res.error == ContractError.DUPLICATE
    assert int(res.error) == 101
    data = registry.get_recipient_data(ALICE)
    assert data.income_level == 40000
    assert data.household_size == 3


def test_update_recipient_replaces_record_and_refreshes_height(registry, height) -> None:
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)
    height.advance(50)

    res = registry.update_recipient(ADMIN, ALICE, income=45000, household_size=4)
    assert res.ok is True

    data = registry.get_recipient_data(ALICE)
    assert data.income_level == 45000
    assert data.household_size == 4
    assert data.last_verified_at == 150


def test_update_missing_recipient(registry) -> None:
    res = registry.update_recipient(ADMIN, ALICE, income=45000, household_size=4)
    assert res.error == ContractError.NOT_FOUND
    assert int(res.error) == 102


def test_remove_recipient(registry) -> None:
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)

    assert registry.remove_recipient(BOB, ALICE).error == ContractError.NOT_ADMIN
    assert registry.get_recipient_data(ALICE) is not None

    assert registry.remove_recipient(ADMIN, ALICE).ok is True
    assert registry.get_recipient_data(ALICE) is None
    assert registry.remove_recipient(ADMIN, ALICE).error == ContractError.NOT_FOUND


def test_removed_recipient_can_register_again(registry) -> None:
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)
    registry.remove_recipient(ADMIN, ALICE)

    res = registry.register_recipient(ADMIN, ALICE, income=90000, household_size=1)
    assert res.ok is True
    assert registry.get_recipient_data(ALICE).is_eligible is False


def test_is_recipient_eligible(registry) -> None:
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)
    res = registry.is_recipient_eligible(ALICE)
    assert res.ok is True
    assert res.value is True

    # 90000 > 50000 + 2 * 10000
    registry.register_recipient(ADMIN, BOB, income=90000, household_size=2)
    res = registry.is_recipient_eligible(BOB)
    assert res.ok is True
    assert res.value is False


def test_eligibility_limit_is_inclusive(registry) -> None:
    registry.register_recipient(ADMIN, ALICE, income=70000, household_size=2)
    assert registry.is_recipient_eligible(ALICE).value is True


def test_is_recipient_eligible_unknown(registry) -> None:
    assert registry.is_recipient_eligible(ALICE).error == ContractError.NOT_FOUND


def test_update_eligibility_criteria(registry) -> None:
    assert registry.update_eligibility_criteria(
        ADMIN, income_threshold=60000, household_multiplier=15000
    ).ok is True
    assert registry.get_eligibility_criteria() == EligibilityCriteria(60000, 15000)

    registry.register_recipient(ADMIN, ALICE, income=70000, household_size=2)
    assert registry.is_recipient_eligible(ALICE).value is True


def test_update_eligibility_criteria_requires_admin(registry) -> None:
    res = registry.update_eligibility_criteria(ALICE, income_threshold=1, household_multiplier=1)
    assert res.error == ContractError.NOT_ADMIN
    assert registry.get_eligibility_criteria() == EligibilityCriteria()


def test_criteria_change_does_not_recompute_existing_records(registry) -> None:
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=0)
    registry.update_eligibility_criteria(ADMIN, income_threshold=10000, household_multiplier=0)

    # The stored decision stands until the recipient is re-verified.
    assert registry.is_recipient_eligible(ALICE).value is True

    registry.update_recipient(ADMIN, ALICE, income=40000, household_size=0)
    assert registry.is_recipient_eligible(ALICE).value is False


def test_verification_expires(registry, height) -> None:
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)

    height.advance(DEFAULT_VERIFICATION_PERIOD + 1)

    res = registry.is_recipient_eligible(ALICE)
    assert res.ok is False
    assert res.error == ContractError.VERIFICATION_EXPIRED
    assert int(res.error) == 103
    assert res.value is None


def test_verification_expiry_boundary(height) -> None:
    registry = RecipientRegistry(
        admin=AdminContext(ADMIN), height_source=height, verification_period=10
    )
    registry.register_recipient(ADMIN, ALICE, income=40000, household_size=3)

    height.advance(9)
    assert registry.is_recipient_eligible(ALICE).value is True

    height.advance(1)
    assert registry.is_recipient_eligible(ALICE).error == ContractError.VERIFICATION_EXPIRED

    registry.update_recipient(ADMIN, ALICE, income=40000, household_size=3)
    assert registry.is_recipient_eligible(ALICE).value is True


def test_set_admin(registry) -> None:
    assert registry.set_admin(ADMIN, ALICE).ok is True
    assert registry.admin == ALICE
    assert registry.register_recipient(ADMIN, BOB, income=1, household_size=1).error == (
        ContractError.NOT_ADMIN
    )
    assert registry.register_recipient(ALICE, BOB, income=1, household_size=1).ok is True
