"""
Query filters and grouping specs for the transaction store.

Filters are plain dataclasses compiled to parameterized SQL fragments, so
services never build SQL strings themselves.
"""
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple, Union

from core.models import PRICE_BOUNDARIES, OTHER_BUCKET, month_filter_value

# Columns that may be used as grouping keys or summed
GROUPABLE_COLUMNS = frozenset({"category", "sold", "title"})
SUMMABLE_COLUMNS = frozenset({"price"})
SEARCH_COLUMNS = ("title", "description", "category")


@dataclass(frozen=True)
class TransactionFilter:
    """
    Record filter.

    Attributes:
        search: Case-insensitive substring matched against title, description
                or category. Empty matches everything.
        month: Month number compared with month(date_of_sale); None means any
               month. INVALID_MONTH (0) matches nothing.
        sold: Restrict to sold/unsold records; None means both.
    """
    search: str = ""
    month: Optional[int] = None
    sold: Optional[bool] = None

    @classmethod
    def for_month(cls, month_name: Optional[str], **kwargs) -> "TransactionFilter":
        """Filter on a month given by name; unknown names match nothing."""
        return cls(month=month_filter_value(month_name), **kwargs)

    def to_sql(self) -> Tuple[str, List[Any]]:
        """
        Compile to a WHERE clause body and its parameters.

        The search predicate is always present, even for an empty search.
        """
        search_sql = " OR ".join(
            f"contains(lower({column}), lower(?))" for column in SEARCH_COLUMNS
        )
        clauses = [f"(? = '' OR {search_sql})"]
        params: List[Any] = [self.search] + [self.search] * len(SEARCH_COLUMNS)

        if self.month is not None:
            clauses.append("month(date_of_sale) = ?")
            params.append(self.month)

        if self.sold is not None:
            clauses.append("sold = ?")
            params.append(self.sold)

        return " AND ".join(clauses), params


@dataclass(frozen=True)
class PriceBuckets:
    """
    Histogram key over a numeric column.

    Each bucket spans [boundaries[i], boundaries[i+1]); values outside every
    bucket are grouped under `default`.
    """
    column: str = "price"
    boundaries: Tuple[float, ...] = PRICE_BOUNDARIES
    default: str = OTHER_BUCKET

    def __post_init__(self):
        if self.column not in SUMMABLE_COLUMNS:
            raise ValueError(f"Cannot bucket on column {self.column!r}")
        if len(self.boundaries) < 2:
            raise ValueError("At least two boundaries are required")
        if list(self.boundaries) != sorted(self.boundaries):
            raise ValueError("Boundaries must be ascending")

    @property
    def lower_bounds(self) -> Tuple[float, ...]:
        return self.boundaries[:-1]

    def to_sql(self) -> str:
        """
        CASE expression yielding the bucket index, or -1 for the default bucket.

        Boundaries are inlined as literals; they are numbers, never user input.
        """
        whens = []
        for index, (lower, upper) in enumerate(zip(self.boundaries, self.boundaries[1:])):
            condition = f"{self.column} >= {lower!r}"
            if not math.isinf(upper):
                condition += f" AND {self.column} < {upper!r}"
            whens.append(f"WHEN {condition} THEN {index}")
        return f"CASE {' '.join(whens)} ELSE -1 END"


@dataclass(frozen=True)
class GroupSpec:
    """
    Aggregation request: group matching records and count (and optionally sum).

    `key` is a column name, a PriceBuckets spec, or None for a single group
    over all matching records.
    """
    key: Union[str, PriceBuckets, None] = None
    sum_field: Optional[str] = None
    filter: TransactionFilter = field(default_factory=TransactionFilter)

    def __post_init__(self):
        if isinstance(self.key, str) and self.key not in GROUPABLE_COLUMNS:
            raise ValueError(f"Cannot group on column {self.key!r}")
        if self.sum_field is not None and self.sum_field not in SUMMABLE_COLUMNS:
            raise ValueError(f"Cannot sum column {self.sum_field!r}")
