"""Service layer encapsulating billing logic for API routers and jobs."""

from .billing import (
    BillingFailure,
    BillingRunResult,
    BillingService,
    apply_manual_edit,
    compose,
    compute_total_amount,
    resolve_mora,
)
from .billing_data import BillingDataAccess, ComposedBill, FineRecord, SqlBillingDataAccess
from .calculation_params import CalculationParamService
from .comments import CommentService
from .dashboard import DashboardService
from .errors import (
    BillingError,
    BillNotFoundError,
    CompositionError,
    DataAccessError,
    ValidationError,
)
from .meter_charges import MeterChargeService
from .meters import MeterService
from .readings import ReadingService
from .tariff_billing import (
    BillingCalculation,
    ReadingPoint,
    TariffBand,
    allocate,
    calculate_consumption,
    resolve_previous_reading,
)
from .tariff_catalog import TariffCatalogService, validate_band

__all__ = [
    "BillingCalculation",
    "BillingDataAccess",
    "BillNotFoundError",
    "BillingError",
    "BillingFailure",
    "BillingRunResult",
    "BillingService",
    "CalculationParamService",
    "CommentService",
    "ComposedBill",
    "CompositionError",
    "DashboardService",
    "DataAccessError",
    "FineRecord",
    "MeterChargeService",
    "MeterService",
    "ReadingPoint",
    "ReadingService",
    "SqlBillingDataAccess",
    "TariffBand",
    "TariffCatalogService",
    "ValidationError",
    "allocate",
    "apply_manual_edit",
    "calculate_consumption",
    "compose",
    "compute_total_amount",
    "resolve_mora",
    "resolve_previous_reading",
    "validate_band",
]
