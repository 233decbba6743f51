"""
Tests for core.exceptions module.
"""
import pytest

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


class TestTransactionsError:
    """Tests for base TransactionsError exception."""

    def test_message_only(self):
        error = TransactionsError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details is None

    def test_message_with_details(self):
        error = TransactionsError("Failed to fetch", "Connection timeout")
        assert str(error) == "Failed to fetch: Connection timeout"


class TestFetchError:

    def test_inheritance(self):
        assert isinstance(FetchError("x"), TransactionsError)

    def test_status_code(self):
        error = FetchError("Bad status", status_code=503)
        assert error.status_code == 503

    def test_status_code_default(self):
        assert FetchError("Network down").status_code is None


class TestStoreErrors:

    @pytest.mark.parametrize("cls", [StoreWriteError, StoreQueryError, QueryTimeoutError])
    def test_are_store_errors(self, cls):
        args = ("SELECT 1", 1.0) if cls is QueryTimeoutError else ("failed",)
        error = cls(*args)
        assert isinstance(error, StoreError)
        assert isinstance(error, TransactionsError)

    def test_write_error_index(self):
        error = StoreWriteError("Malformed record at index 3", "KeyError('price')", index=3)
        assert error.index == 3
        assert "index 3" in str(error)

    def test_timeout_is_query_error(self):
        error = QueryTimeoutError("SELECT * FROM transactions", 30.0)
        assert isinstance(error, StoreQueryError)
        assert error.timeout == 30.0
        assert "30.0s" in str(error)

    def test_timeout_truncates_query(self):
        error = QueryTimeoutError("x" * 500, 5.0)
        assert len(error.query) == 203
        assert error.query.endswith("...")


class TestSeedError:

    def test_chained_cause(self):
        cause = FetchError("Dataset request failed", status_code=500)
        try:
            try:
                raise cause
            except FetchError as e:
                raise SeedError("Error initializing database", str(e)) from e
        except SeedError as error:
            assert error.__cause__ is cause


class TestCompositionError:

    def test_wraps_cause(self):
        cause = StoreQueryError("Query failed", "table missing")
        error = CompositionError("Error fetching combined data", cause=cause)
        assert error.cause is cause
        assert error.details == "Query failed: table missing"
        assert str(error) == "Error fetching combined data: Query failed: table missing"

    def test_without_cause(self):
        error = CompositionError("Error fetching combined data")
        assert error.cause is None
        assert str(error) == "Error fetching combined data"


class TestValidationError:

    def test_not_transactions_error(self):
        assert not isinstance(ValidationError("page", "Must be 1 or greater"), TransactionsError)

    def test_field_and_message(self):
        error = ValidationError("limit", "Must be 1 or greater")
        assert error.field == "limit"
        assert str(error) == "limit: Must be 1 or greater"

    def test_with_value(self):
        error = ValidationError("page", "Must be 1 or greater", value=-2)
        assert "-2" in str(error)
