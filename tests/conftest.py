"""
Pytest fixtures for the group store test suite.

Provides:
- A fresh in-memory SQLite database per test (tables created, foreign keys on)
- Deterministic clock and actor fixtures
- Kernel service, selector and module facade fixtures
- A small hand-built group (holding, two subsidiaries, one branch)
- Captured structured log records
"""

import json
import logging
from io import StringIO
from typing import Generator
from uuid import UUID

import pytest
from sqlalchemy.orm import Session

from group_kernel.db.engine import build_engine, create_tables, open_session
from group_kernel.domain.clock import DeterministicClock
from group_kernel.domain.dtos import CompanyInput
from group_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from group_kernel.selectors.account_selector import AccountSelector
from group_kernel.selectors.company_selector import CompanySelector
from group_kernel.services.account_service import AccountService
from group_kernel.services.company_service import CompanyService
from group_kernel.services.elimination_service import EliminationService
from group_kernel.services.intercompany_service import IntercompanyService
from group_modules.multi_company import MultiCompanyService

# Test actor ID for all test operations
TEST_ACTOR_ID = UUID("00000000-0000-4000-a000-0000000000ff")


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, handler=logging.NullHandler())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture group_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, company_service):
            company_service.create_company(...)
            logs = captured_logs()
            assert any(r["message"] == "company_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("group_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_engine():
    """A private in-memory database for one test."""
    engine = build_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    with open_session(db_engine) as sess:
        yield sess


@pytest.fixture
def test_actor_id() -> UUID:
    """Provide a consistent test actor ID."""
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


# =============================================================================
# Services and selectors
# =============================================================================


@pytest.fixture
def company_service(session) -> CompanyService:
    return CompanyService(session)


@pytest.fixture
def account_service(session) -> AccountService:
    return AccountService(session)


@pytest.fixture
def elimination_service(session) -> EliminationService:
    return EliminationService(session)


@pytest.fixture
def ic_service(session, deterministic_clock) -> IntercompanyService:
    return IntercompanyService(session, deterministic_clock)


@pytest.fixture
def company_selector(session) -> CompanySelector:
    return CompanySelector(session)


@pytest.fixture
def account_selector(session) -> AccountSelector:
    return AccountSelector(session)


@pytest.fixture
def multi_company(session, deterministic_clock) -> MultiCompanyService:
    """The module facade; commits on success, rolls back on error."""
    return MultiCompanyService(session, clock=deterministic_clock)


# =============================================================================
# Group fixtures
# =============================================================================


@pytest.fixture
def group(company_service, test_actor_id) -> dict:
    """
    A four-company group built through CompanyService.

        Group Holdings (HOLD)
        +-- Alpha Sub (ALPHA)
        |   +-- Alpha Branch (ALPHA-BR)
        +-- Beta Sub (BETA)

    Returns a dict of code -> CompanyInfo.
    """
    holding = company_service.create_company(
        CompanyInput(name="Group Holdings", code="HOLD", company_type="holding", currency="USD"),
        test_actor_id,
    )
    alpha = company_service.create_company(
        CompanyInput(
            name="Alpha Sub", code="ALPHA", company_type="subsidiary",
            currency="USD", parent_id=holding.id,
        ),
        test_actor_id,
    )
    beta = company_service.create_company(
        CompanyInput(
            name="Beta Sub", code="BETA", company_type="subsidiary",
            currency="EUR", parent_id=holding.id,
        ),
        test_actor_id,
    )
    branch = company_service.create_company(
        CompanyInput(
            name="Alpha Branch", code="ALPHA-BR", company_type="branch",
            currency="USD", parent_id=alpha.id,
        ),
        test_actor_id,
    )
    return {"HOLD": holding, "ALPHA": alpha, "BETA": beta, "ALPHA-BR": branch}


@pytest.fixture
def seeded_group(multi_company) -> dict[str, UUID]:
    """The bundled Unanza group loaded through the facade; code -> id."""
    return multi_company.load_sample_data()
