"""
Custom exception hierarchy for the transactions backend.

Exception Hierarchy:
    TransactionsError (base)
    ├── FetchError              - Remote dataset unreachable or invalid
    ├── StoreError              - Record store failure
    │   ├── StoreWriteError     - Insert/delete failed (malformed records)
    │   └── StoreQueryError     - Find/count/aggregate failed
    │       └── QueryTimeoutError
    ├── SeedError               - Reseed failed (wraps the cause)
    └── CompositionError        - A sub-call of the combined view failed

    ValidationError             - Request parameter validation failed
"""


class TransactionsError(Exception):
    """Base exception for all backend errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class FetchError(TransactionsError):
    """
    Remote dataset could not be fetched.

    Raised on network failure, non-2xx responses and bodies that are not
    a JSON array.
    """

    def __init__(self, message: str, details: str = None, status_code: int = None):
        super().__init__(message, details)
        self.status_code = status_code


class StoreError(TransactionsError):
    """Base class for record store failures."""


class StoreWriteError(StoreError):
    """
    Store write failed.

    Also raised for malformed input records, in which case `index`
    points at the offending item of the batch.
    """

    def __init__(self, message: str, details: str = None, index: int = None):
        super().__init__(message, details)
        self.index = index


class StoreQueryError(StoreError):
    """Store read (find, count, aggregate) failed."""


class QueryTimeoutError(StoreQueryError):
    """
    Database query exceeded timeout.

    Indicates a long-running query that should be investigated.
    """

    def __init__(self, query: str, timeout: float, details: str = None):
        self.query = query[:200] + "..." if len(query) > 200 else query
        self.timeout = timeout
        super().__init__(f"Query timed out after {timeout}s", details)

    def __str__(self) -> str:
        return f"QueryTimeoutError: Query timed out after {self.timeout}s - {self.query}"


class SeedError(TransactionsError):
    """Reseeding the store failed. The original error is chained as __cause__."""


class CompositionError(TransactionsError):
    """
    One of the concurrent sub-calls of the combined view failed.

    `cause` holds the first failure; no partial result is produced.
    """

    def __init__(self, message: str, cause: BaseException = None):
        super().__init__(message, str(cause) if cause is not None else None)
        self.cause = cause


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating request parameters before querying the store.
    """

    def __init__(self, field: str, message: str, value: any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"
