"""Shared fixtures for the finance engine tests."""

from datetime import date
from itertools import count
from unittest.mock import MagicMock

import pytest

from monifly.application.store import FinancialDomainStore
from monifly.domain.services.fx import CurrencyConverter, RateTable
from monifly.domain.services.periods import PeriodResolver


# A Monday, the 20th of the month.
TODAY = date(2024, 5, 20)


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture
def rate_table() -> RateTable:
    return RateTable.from_pivot({"EUR": "1.10", "GBP": "1.25"})


@pytest.fixture
def converter(rate_table, logger) -> CurrencyConverter:
    return CurrencyConverter(rate_table, logger=logger)


@pytest.fixture
def resolver() -> PeriodResolver:
    return PeriodResolver(clock=lambda: TODAY)


@pytest.fixture
def id_factory():
    counter = count(1)
    return lambda prefix: f"{prefix}_{next(counter)}"


@pytest.fixture
def store(converter, resolver, logger, id_factory) -> FinancialDomainStore:
    return FinancialDomainStore(
        converter=converter,
        resolver=resolver,
        logger=logger,
        id_factory=id_factory,
    )
