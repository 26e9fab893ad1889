"""Routers package."""

from .billing import router as billing_router
from .calculation_params import router as calculation_params_router
from .comments import router as comments_router
from .dashboard import router as dashboard_router
from .meter_charges import router as meter_charges_router
from .meters import router as meters_router
from .readings import router as readings_router
from .tariffs import router as tariffs_router

__all__ = [
    "billing_router",
    "calculation_params_router",
    "comments_router",
    "dashboard_router",
    "meter_charges_router",
    "meters_router",
    "readings_router",
    "tariffs_router",
]
