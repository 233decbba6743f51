"""
Core library for the transactions backend.

This package contains the domain and storage layers used by the web package:
- exceptions: Custom exception hierarchy
- models: Transaction record, month table, price buckets
- filters: Store filters and aggregation specs
- validators: Request parameter validation
- config: Centralized configuration
"""

# Import in dependency order
from core.exceptions import (
    TransactionsError,
    FetchError,
    StoreError,
    StoreWriteError,
    StoreQueryError,
    QueryTimeoutError,
    SeedError,
    CompositionError,
    ValidationError,
)

from core.models import (
    Month,
    Transaction,
    resolve_month,
    month_filter_value,
    INVALID_MONTH,
    PRICE_BOUNDARIES,
)

from core.filters import (
    TransactionFilter,
    PriceBuckets,
    GroupSpec,
)

from core.validators import (
    validate_page,
    validate_limit,
    validate_search,
)

from core.config import config

__all__ = [
    # Exceptions
    "TransactionsError",
    "FetchError",
    "StoreError",
    "StoreWriteError",
    "StoreQueryError",
    "QueryTimeoutError",
    "SeedError",
    "CompositionError",
    "ValidationError",
    # Models
    "Month",
    "Transaction",
    "resolve_month",
    "month_filter_value",
    "INVALID_MONTH",
    "PRICE_BOUNDARIES",
    # Filters
    "TransactionFilter",
    "PriceBuckets",
    "GroupSpec",
    # Validators
    "validate_page",
    "validate_limit",
    "validate_search",
    # Config
    "config",
]
