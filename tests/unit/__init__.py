"""
tests.unit
==========

Shared helpers for unit-test modules:

    from tests.unit import read_json_fixture

Fixtures (ABI documents, captured payloads) live under ``tests/fixtures/``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# tests/unit/__init__.py -> tests -> <root>
ROOT: Path = Path(__file__).resolve().parents[2]
FIXTURES: Path = ROOT / "tests" / "fixtures"

__all__ = ["ROOT", "FIXTURES", "read_text_fixture", "read_json_fixture"]


def read_text_fixture(relpath: str) -> str:
    """
    Load a text fixture from `tests/fixtures/<relpath>` using UTF-8.

    Raises FileNotFoundError if the fixture does not exist.
    """
    path = (FIXTURES / relpath).resolve()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def read_json_fixture(relpath: str) -> Any:
    return json.loads(read_text_fixture(relpath))
