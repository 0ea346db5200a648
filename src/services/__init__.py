"""
Services Module - Application services for the creator tax engine.

Application Services (orchestration):
- CreatorTaxService: classification, corrections and tax estimation

Infrastructure Services:
- Logging and observability (logging_config)
"""

from .logging_config import configure_logging, get_logger, CalculationLogger


# Deferred to avoid a circular import with calculator.engine
def get_creator_tax_service(transaction_store, correction_store, profile_store, **kwargs):
    """Build a CreatorTaxService over the given stores."""
    from .creator_tax_service import CreatorTaxService
    return CreatorTaxService(transaction_store, correction_store, profile_store, **kwargs)


__all__ = [
    "configure_logging",
    "get_logger",
    "CalculationLogger",
    "get_creator_tax_service",
]
