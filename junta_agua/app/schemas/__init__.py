"""Expose Pydantic schemas for convenient imports."""

from .bill import (
    BillAmounts,
    BillCharges,
    BillEdit,
    BillingFailureRead,
    BillingRunResponse,
    BillListResponse,
    BillRead,
    BillSave,
    ComposedBillRead,
)
from .calculation_param import (
    CalculationParamCreate,
    CalculationParamRead,
    CalculationParamUpdate,
)
from .comment import CommentCreate, CommentListResponse, CommentRead, CommentUpdate
from .common import MeterPeriodKey, PaginatedResponse
from .dashboard import DashboardSummary
from .meter import MeterBase, MeterCreate, MeterListResponse, MeterRead, MeterUpdate
from .meter_charge import (
    DebtRead,
    DebtUpsert,
    GardenValueRead,
    GardenValueUpsert,
    MeterFineRead,
    MeterFineUpsert,
)
from .reading import PreviousReadingResponse, ReadingListResponse, ReadingRead, ReadingUpsert
from .tariff import (
    BillingCalculationRead,
    TariffBase,
    TariffBreakdownLine,
    TariffCreate,
    TariffListResponse,
    TariffRead,
    TariffUpdate,
)

__all__ = [
    "BillAmounts",
    "BillCharges",
    "BillEdit",
    "BillingCalculationRead",
    "BillingFailureRead",
    "BillingRunResponse",
    "BillListResponse",
    "BillRead",
    "BillSave",
    "CalculationParamCreate",
    "CalculationParamRead",
    "CalculationParamUpdate",
    "CommentCreate",
    "CommentListResponse",
    "CommentRead",
    "CommentUpdate",
    "ComposedBillRead",
    "DashboardSummary",
    "DebtRead",
    "DebtUpsert",
    "GardenValueRead",
    "GardenValueUpsert",
    "MeterBase",
    "MeterCreate",
    "MeterFineRead",
    "MeterFineUpsert",
    "MeterListResponse",
    "MeterRead",
    "MeterUpdate",
    "MeterPeriodKey",
    "PaginatedResponse",
    "PreviousReadingResponse",
    "ReadingListResponse",
    "ReadingRead",
    "ReadingUpsert",
    "TariffBase",
    "TariffBreakdownLine",
    "TariffCreate",
    "TariffListResponse",
    "TariffRead",
    "TariffUpdate",
]
