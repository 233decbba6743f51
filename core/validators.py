"""
Input validation functions for API parameters.

All validators raise ValidationError on invalid input.
"""
from typing import Optional

from core.exceptions import ValidationError
from core.models import resolve_month

MAX_SEARCH_LENGTH = 255


def validate_page(page: int) -> int:
    """
    Validate a 1-based page number.

    Raises:
        ValidationError: If page is below 1
    """
    if page < 1:
        raise ValidationError("page", "Must be 1 or greater", page)
    return page


def validate_limit(limit: int) -> int:
    """
    Validate a page size.

    No upper bound is imposed; the listing returns what the store holds.

    Raises:
        ValidationError: If limit is below 1
    """
    if limit < 1:
        raise ValidationError("limit", "Must be 1 or greater", limit)
    return limit


def validate_search(search: Optional[str]) -> str:
    """
    Normalize free-text search. None becomes "".

    Raises:
        ValidationError: If search is too long
    """
    if search is None:
        return ""
    if len(search) > MAX_SEARCH_LENGTH:
        raise ValidationError(
            "search",
            f"Must be at most {MAX_SEARCH_LENGTH} characters",
            len(search),
        )
    return search


def is_known_month(month: Optional[str]) -> bool:
    """Whether a month name resolves. Unknown names are allowed and match nothing."""
    return resolve_month(month) is not None
