"""
Unit tests for domain layer boundaries.

The domain package must stay free of web framework, validation and
database driver imports; adapters and the API layer depend on it,
never the reverse.
"""

from pathlib import Path

import pytest

DOMAIN_DIR = Path(__file__).resolve().parents[2] / "useraccounts" / "domain"

FORBIDDEN_IMPORTS = [
    "from fastapi",
    "import fastapi",
    "from starlette",
    "from pydantic",
    "from psycopg",
    "import psycopg",
    "from useraccounts.api",
    "from useraccounts.adapters",
]


@pytest.mark.parametrize("forbidden", FORBIDDEN_IMPORTS)
def test_no_forbidden_imports_in_domain(forbidden: str) -> None:
    offenders = [
        path.name
        for path in DOMAIN_DIR.glob("*.py")
        if forbidden in path.read_text(encoding="utf-8")
    ]
    assert offenders == [], f"{forbidden!r} found in {offenders}"


def test_domain_modules_exist() -> None:
    names = {path.stem for path in DOMAIN_DIR.glob("*.py")}
    assert {"models", "ports", "exceptions", "tokens", "users", "countries"} <= names
