"""Snapshot stores for vehicles and financing contracts."""

from moto_finance.store.financing import FinancingDataStore, FinancingRepository
from moto_finance.store.json_file import JsonFileStore

__all__ = ["FinancingDataStore", "FinancingRepository", "JsonFileStore"]
