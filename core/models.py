"""
Domain models for transaction records.

Provides the Transaction dataclass, the fixed month table used by every
month filter, and the price-bucket boundaries used for chart histograms.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Optional, Tuple


# ═══════════════════════════════════════════════════════════════════════════════
# MONTHS
# ═══════════════════════════════════════════════════════════════════════════════

class Month(IntEnum):
    """Calendar months, numbered as in month(dateOfSale)."""
    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12

    @property
    def display_name(self) -> str:
        return self.name.capitalize()

    @property
    def abbreviation(self) -> str:
        return self.name[:3].capitalize()


# Never equal to month(dateOfSale); an unresolved month name filters on this
INVALID_MONTH = 0

_MONTH_LOOKUP: Dict[str, Month] = {}
for _month in Month:
    _MONTH_LOOKUP[_month.name.lower()] = _month
    _MONTH_LOOKUP[_month.name[:3].lower()] = _month


def resolve_month(name: Optional[str]) -> Optional[int]:
    """
    Resolve a month name to its number (1-12).

    Full names and three-letter abbreviations are accepted in any case
    ("January", "jan", "JAN"). Returns None for anything else.
    """
    if not name:
        return None
    month = _MONTH_LOOKUP.get(name.strip().lower())
    return int(month) if month is not None else None


def month_filter_value(name: Optional[str]) -> int:
    """Month number to filter on; INVALID_MONTH when the name is unknown."""
    number = resolve_month(name)
    return number if number is not None else INVALID_MONTH


# ═══════════════════════════════════════════════════════════════════════════════
# PRICE BUCKETS
# ═══════════════════════════════════════════════════════════════════════════════

# Lower bound inclusive, upper bound exclusive; the last bucket is open-ended
PRICE_BOUNDARIES: Tuple[float, ...] = (0, 100, 200, 300, 400, 500, 600, 700, 800, 900, math.inf)
OTHER_BUCKET = "Other"


def bucket_label(lower: float, upper: float) -> str:
    """Display label for a price bucket, e.g. "100-200" or "900-above"."""
    if math.isinf(upper):
        return f"{lower:g}-above"
    return f"{lower:g}-{upper:g}"


# ═══════════════════════════════════════════════════════════════════════════════
# TRANSACTION
# ═══════════════════════════════════════════════════════════════════════════════

def _parse_date_of_sale(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"dateOfSale must be an ISO-8601 string, got {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_sold(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise ValueError(f"sold must be a boolean, got {value!r}")


def _require_text(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {type(value).__name__}")
    return value


@dataclass
class Transaction:
    """One product sale record."""
    title: str
    description: str
    category: str
    price: float
    sold: bool
    date_of_sale: datetime
    image: Optional[str] = None
    id: Optional[int] = None  # assigned by the store

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Transaction":
        """
        Create Transaction from a dataset item.

        Any `id` in the item is ignored; the store assigns ids.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field cannot be parsed
        """
        if not isinstance(data, dict):
            raise ValueError(f"record must be an object, got {type(data).__name__}")

        price = data["price"]
        if isinstance(price, bool) or price is None:
            raise ValueError(f"price must be numeric, got {price!r}")

        return cls(
            title=_require_text(data, "title"),
            description=_require_text(data, "description"),
            category=_require_text(data, "category"),
            price=float(price),
            sold=_parse_sold(data["sold"]),
            date_of_sale=_parse_date_of_sale(data["dateOfSale"]),
            image=data.get("image"),
        )

    @property
    def month(self) -> Month:
        return Month(self.date_of_sale.month)

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape returned by the listing endpoints."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "price": self.price,
            "sold": self.sold,
            "image": self.image,
            "dateOfSale": self.date_of_sale.isoformat(timespec="milliseconds") + "Z",
        }
