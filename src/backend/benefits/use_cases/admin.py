"""Collaborators injected into every contract: the admin and the height source."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from src.backend.benefits.use_cases.contract_results import (
    ContractError,
    ContractResult,
    require_unsigned,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AdminContext:
    """The single identity allowed to mutate one contract's state."""

    admin: str

    def is_admin(self, caller: str) -> bool:
        return caller == self.admin

    def transfer(self, caller: str, new_admin: str) -> ContractResult[bool]:
        if not self.is_admin(caller):
            logger.warning("Admin transfer rejected for caller %s", caller)
            return ContractResult.failure(ContractError.NOT_ADMIN)
        if not new_admin:
            raise ValueError("new_admin must be a non-empty identity")

        logger.info("Admin transferred: %s -> %s", self.admin, new_admin)
        self.admin = new_admin
        return ContractResult.success()


class BlockHeightSource(Protocol):
    def current_height(self) -> int: ...


class ManualBlockHeight:
    """In-memory height source. Never moves backwards."""

    def __init__(self, height: int = 0) -> None:
        require_unsigned(height=height)
        self._height = height

    def current_height(self) -> int:
        return self._height

    def advance(self, blocks: int = 1) -> int:
        require_unsigned(blocks=blocks)
        self._height += blocks
        return self._height

    def set_height(self, height: int) -> None:
        require_unsigned(height=height)
        if height < self._height:
            raise ValueError(
                f"Block height cannot decrease (current={self._height}, requested={height})"
            )
        self._height = height
