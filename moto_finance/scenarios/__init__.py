"""Scenarios for generating realistic dealership data sets."""

from moto_finance.scenarios.portfolio import DealershipPortfolioScenario

__all__ = ["DealershipPortfolioScenario"]
