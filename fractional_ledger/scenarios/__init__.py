"""Scenarios for simulating marketplace activity."""

from fractional_ledger.scenarios.marketplace import MarketplaceScenario

__all__ = ["MarketplaceScenario"]
