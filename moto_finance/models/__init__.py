"""Domain models for the financing engine."""

from moto_finance.models.events import Event

__all__ = ["Event"]
