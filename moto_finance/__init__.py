"""Financing and installment engine for a motorcycle dealership back office."""

__version__ = "0.1.0"
