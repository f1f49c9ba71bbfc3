"""
config.py
Application constants (pricing, tax, invoice numbering) and logging setup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    invoice_start_number: int = 1000
    invoice_due_days: int = 15
    annual_discount: float = 0.10
    tax_rate: float = 0.12
    # Tolerance when comparing a payment against an invoice total
    payment_epsilon: float = 0.0001
    datetime_format: str = "%Y-%m-%d %H:%M"
    log_level: str = "WARNING"
    log_format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
