"""
Pytest configuration and fixtures
"""

import pytest
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError, OperationalError

HEADER = "name.firstName,name.lastName,age,address.line1,address.city,address.state,gender,contact.email"


class FakeTransactionalSession:
    """
    Stands in for AsyncSession with transaction semantics:
    inserted rows stay pending until commit and vanish on rollback.
    """

    def __init__(self, fail_on_execute: Optional[int] = None, fail_on_begin: bool = False):
        self.fail_on_execute = fail_on_execute
        self.fail_on_begin = fail_on_begin
        self.pending: List[Dict[str, Any]] = []
        self.committed: List[Dict[str, Any]] = []
        self.execute_calls = 0
        self.begin_calls = 0
        self.commit_calls = 0
        self.rollback_calls = 0

    async def begin(self):
        if self.fail_on_begin:
            raise OperationalError("BEGIN", {}, ConnectionRefusedError("connection refused"))
        self.begin_calls += 1

    async def connection(self):
        return MagicMock()

    async def execute(self, stmt):
        self.execute_calls += 1
        if self.fail_on_execute == self.execute_calls:
            raise IntegrityError("INSERT INTO users", {}, Exception("simulated constraint violation"))

        params = stmt.compile(dialect=postgresql.dialect()).params
        names = [value for key, value in params.items() if key.startswith("name")]
        self.pending.extend({"name": name} for name in names)

    async def commit(self):
        self.commit_calls += 1
        self.committed.extend(self.pending)
        self.pending = []

    async def rollback(self):
        self.rollback_calls += 1
        self.pending = []


@pytest.fixture
def fake_session():
    return FakeTransactionalSession()


@pytest.fixture
def failing_session_factory():
    """Build a fake session that fails on the n-th execute or on BEGIN"""

    def _make(fail_on_execute=None, fail_on_begin=False):
        return FakeTransactionalSession(fail_on_execute=fail_on_execute, fail_on_begin=fail_on_begin)

    return _make


@pytest.fixture
def mock_report_generator():
    generator = MagicMock()
    generator.generate = AsyncMock(return_value="--- Age Distribution Report ---")
    return generator


@pytest.fixture
def write_csv(tmp_path):
    """Write lines to a CSV file and return its path"""

    def _write(lines, name="users.csv", newline="\n"):
        path = tmp_path / name
        path.write_bytes(newline.join(lines).encode("utf-8"))
        return path

    return _write


@pytest.fixture
def csv_header():
    return HEADER


@pytest.fixture
def mock_csv_lines():
    """Header plus four valid rows"""
    return [
        HEADER,
        "Rohit,Prasad,35,A-563 Rakshak Society,Pune,Maharashtra,male,rohit@example.com",
        "Ann,Lee,19,,Paris,,female,",
        "Raj,Kumar,45,,,,,",
        "Meera,Iyer,72,12 Lake Road,Chennai,Tamil Nadu,,meera@example.com",
    ]


@pytest.fixture
def make_rows():
    """Generate ``count`` valid data rows matching HEADER"""

    def _make(count: int) -> List[str]:
        return [
            f"First{i},Last{i},{20 + i % 50},,City{i},,,user{i}@example.com"
            for i in range(count)
        ]

    return _make
