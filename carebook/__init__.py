"""Shift invoicing back office for care services."""

__version__ = "1.0.0"
