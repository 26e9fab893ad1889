"""Expose SQLAlchemy models for convenient imports."""

from .bill import Bill, PaymentStatus
from .calculation_param import CalculationParam, ParamType
from .comment import Comment, CommentStatus
from .meter import Meter, MeterStatus
from .meter_charge import Debt, GardenValue, MeterFine
from .reading import Reading
from .tariff import Tariff, TariffStatus

__all__ = [
    "Bill",
    "CalculationParam",
    "Comment",
    "CommentStatus",
    "Debt",
    "GardenValue",
    "Meter",
    "MeterFine",
    "MeterStatus",
    "ParamType",
    "PaymentStatus",
    "Reading",
    "Tariff",
    "TariffStatus",
]
