"""Faker-based generators for marketplace simulations."""

from fractional_ledger.generators.investor import Investor, InvestorGenerator
from fractional_ledger.generators.property import PropertyGenerator, PropertyOffering

__all__ = ["Investor", "InvestorGenerator", "PropertyGenerator", "PropertyOffering"]
