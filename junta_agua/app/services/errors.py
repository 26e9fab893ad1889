"""Error taxonomy shared by the billing services."""

from __future__ import annotations


class BillingError(RuntimeError):
    """Base class for failures raised by the billing services."""


class DataAccessError(BillingError):
    """Raised when the record store cannot be read or written."""


class ValidationError(BillingError):
    """Raised when input data (amounts, readings, tariff bands) is malformed."""


class CompositionError(BillingError):
    """Raised when a bill cannot be composed for a meter."""


class BillNotFoundError(BillingError):
    """Raised when an operation targets a bill that was never stored."""
