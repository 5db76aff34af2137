"""Pytest configuration.

Ensures local packages can be imported consistently during test collection.
"""

import logging
import sys
from pathlib import Path

import pytest


def _prepend_sys_path(path: Path) -> None:
    resolved = str(path.resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)


REPO_ROOT = Path(__file__).resolve().parent

# Allow importing `src.*` package explicitly.
_prepend_sys_path(REPO_ROOT)


@pytest.fixture(autouse=True)
def _quiet_contract_logs(caplog):
    """Keep contract INFO logs out of test output unless a test asks for them."""
    caplog.set_level(logging.WARNING, logger="src.backend.benefits")
