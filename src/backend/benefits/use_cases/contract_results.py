"""Result values shared by the benefit contracts.

Domain failures are returned, never raised: callers check `ok` before reading
`value`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class ContractError(IntEnum):
    NOT_ADMIN = 100
    DUPLICATE = 101
    NOT_FOUND = 102
    VERIFICATION_EXPIRED = 103


@dataclass(frozen=True, slots=True)
class ContractResult(Generic[T]):
    value: T | None = None
    error: ContractError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T = True) -> "ContractResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ContractError) -> "ContractResult[T]":
        return cls(error=error)

    def to_dict(self) -> dict:
        if self.ok:
            return {"ok": True, "value": self.value}
        return {"ok": False, "error": self.error.name, "code": int(self.error)}


def require_unsigned(**values: int) -> None:
    """Reject negative integers (the ledger models these as unsigned)."""

    for name, value in values.items():
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value}")
