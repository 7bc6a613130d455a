"""Core package exposing the gateway client, data models and dashboard aggregation."""

from .aggregator import DashboardSummary, build_dashboard
from .data_models import Account, Category, Transaction, User
from .errors import ApiValidationError, AuthError, GatewayError, LinkWidgetError, NetworkError
from .formatters import format_currency, format_date, format_percentage
from .gateway import GatewayClient

__all__ = [
    "Account",
    "ApiValidationError",
    "AuthError",
    "Category",
    "DashboardSummary",
    "GatewayClient",
    "GatewayError",
    "LinkWidgetError",
    "NetworkError",
    "Transaction",
    "User",
    "build_dashboard",
    "format_currency",
    "format_date",
    "format_percentage",
]
