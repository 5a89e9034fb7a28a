"""Fixtures for service-level unit tests."""

from unittest.mock import AsyncMock

import pytest

from src.fx_common.enums import Role
from src.fx_gateway.auth.capabilities import Caller
from tests.unit.fakes import FakeCashAccountRepository, FakeTransferRepository, make_caller


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def cash_repo() -> FakeCashAccountRepository:
    return FakeCashAccountRepository()


@pytest.fixture
def transfer_repo() -> FakeTransferRepository:
    return FakeTransferRepository()


@pytest.fixture
def director() -> Caller:
    return make_caller(Role.DIRECTOR)


@pytest.fixture
def cashier() -> Caller:
    return make_caller(Role.CASHIER, agency_id="AG-DLA")


@pytest.fixture
def auditor() -> Caller:
    return make_caller(Role.AUDITOR)
