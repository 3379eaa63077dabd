"""
Tests for Database Loaders and Operations

No live connection: the loaders' pull/push/execute helpers and the shared
connection getter are replaced with fakes.

Run with: pytest shipping_rates/tests/test_database.py -v
"""

import json
from datetime import date, datetime

import polars as pl
import pytest
import redshift_connector

import shared.database as database
from shipping_rates.calculate_costs import calculate_cost
from shipping_rates.data import load_rate_matrix, rows_from_frame
from shipping_rates.data.loaders import database as loaders
from shipping_rates.models import SavedShippingQuote


# =============================================================================
# FAKES
# =============================================================================

class FakeCursor:

    def __init__(self, connection):
        self.connection = connection
        self.description = [(c,) for c in connection.columns]

    def execute(self, query):
        if self.connection.error is not None:
            raise self.connection.error
        self.connection.queries.append(query)

    def fetchall(self):
        return self.connection.rows

    def close(self):
        pass


class FakeConnection:

    def __init__(self, columns=(), rows=(), error=None):
        self.columns = list(columns)
        self.rows = list(rows)
        self.error = error
        self.queries = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


@pytest.fixture
def connection(monkeypatch) -> FakeConnection:
    conn = FakeConnection()
    monkeypatch.setattr(database, "get_connection", lambda force_new=False: conn)
    return conn


@pytest.fixture
def saved_quote() -> SavedShippingQuote:
    row = rows_from_frame(load_rate_matrix().filter(pl.col("rate_id") == "R-1005"))[0]
    return SavedShippingQuote.from_breakdown(
        "RFQ-1", calculate_cost(1.0, row), calculated_at=datetime(2026, 6, 1, 9, 30)
    )


# =============================================================================
# TESTS: SQL LITERALS
# =============================================================================

class TestFormatValue:

    @pytest.mark.parametrize("value,expected", [
        (None, "NULL"),
        (float("nan"), "NULL"),
        ("WH-SZ", "'WH-SZ'"),
        ("O'Brien", "'O''Brien'"),
        (True, "TRUE"),
        (False, "FALSE"),
        (7, "7"),
        (38.8125, "38.8125"),
        (date(2026, 6, 1), "'2026-06-01'"),
        (datetime(2026, 6, 1, 9, 30), "'2026-06-01T09:30:00'"),
    ])
    def test_literals(self, value, expected):
        assert database.format_value(value) == expected


# =============================================================================
# TESTS: SHARED OPERATIONS
# =============================================================================

class TestPullData:

    def test_rows_to_frame(self, connection):
        connection.columns = ["rate_id", "min_charge"]
        connection.rows = [("R-1", 15.0), ("R-2", 8.0)]

        df = database.pull_data("SELECT rate_id, min_charge FROM sourcing.rate_matrix")

        assert df.columns == ["rate_id", "min_charge"]
        assert df["rate_id"].to_list() == ["R-1", "R-2"]

    def test_query_error(self, connection):
        connection.error = redshift_connector.Error("relation does not exist")
        with pytest.raises(RuntimeError, match="Error executing query"):
            database.pull_data("SELECT 1")


class TestExecuteQuery:

    def test_commit(self, connection):
        database.execute_query("UPDATE t SET x = 1")
        assert connection.queries == ["UPDATE t SET x = 1"]
        assert connection.commits == 1

    def test_deferred_commit(self, connection):
        database.execute_query("UPDATE t SET x = 1", commit=False)
        assert connection.commits == 0

    def test_error_rolls_back(self, connection):
        connection.error = redshift_connector.Error("serializable isolation violation")
        with pytest.raises(RuntimeError):
            database.execute_query("UPDATE t SET x = 1")
        assert connection.rollbacks == 1


class TestPushData:

    @pytest.fixture
    def frame(self) -> pl.DataFrame:
        return pl.DataFrame({"rfq_id": ["A", "B", "C"], "total_freight": [1.5, 2.0, None]})

    def test_batches_and_single_commit(self, connection, frame):
        written = database.push_data(frame, "sourcing.quotes", batch_size=2, verbose=False)

        assert written == 3
        assert len(connection.queries) == 2
        assert connection.queries[0] == (
            "INSERT INTO sourcing.quotes (rfq_id, total_freight) VALUES ('A', 1.5), ('B', 2.0)"
        )
        assert connection.queries[1].endswith("VALUES ('C', NULL)")
        assert connection.commits == 1

    def test_requires_schema(self, connection, frame):
        with pytest.raises(ValueError, match="must include schema"):
            database.push_data(frame, "quotes", verbose=False)

    def test_empty_frame(self, connection):
        assert database.push_data(pl.DataFrame({"rfq_id": []}), "sourcing.quotes", verbose=False) == 0
        assert connection.queries == []

    def test_error_rolls_back(self, connection, frame):
        connection.error = redshift_connector.Error("value too long")
        with pytest.raises(RuntimeError, match="Error uploading data"):
            database.push_data(frame, "sourcing.quotes", verbose=False)
        assert connection.rollbacks == 1
        assert connection.commits == 0

    def test_verbose_progress(self, connection, frame, capsys):
        database.push_data(frame, "sourcing.quotes", batch_size=2)
        out = capsys.readouterr().out
        assert "Uploading 3 rows to sourcing.quotes in 2 batch(es)" in out
        assert "Successfully uploaded 3 rows" in out


# =============================================================================
# TESTS: RATE MATRIX REPOSITORY
# =============================================================================

class TestDatabaseRateMatrixRepository:

    def test_build_query(self):
        query = loaders.DatabaseRateMatrixRepository().build_query(
            "WH-SZ", "US", 2.5, date(2026, 6, 1)
        )
        assert "from sourcing.rate_matrix rm" in query
        assert "rm.warehouse_id = 'WH-SZ'" in query
        assert "rm.destination_country = 'US'" in query
        assert "rm.weight_min_kg <= 2.5" in query
        assert "rm.weight_max_kg >= 2.5" in query
        assert "(rm.effective_from is null or rm.effective_from <= '2026-06-01')" in query
        assert query.rstrip().endswith("order by rm.created_at desc")

    def test_quotes_escaped(self):
        query = loaders.DatabaseRateMatrixRepository().build_query(
            "WH'; drop table x; --", "US", 1, date(2026, 6, 1)
        )
        assert "'WH''; drop table x; --'" in query

    def test_custom_tables(self):
        repository = loaders.DatabaseRateMatrixRepository(
            rate_matrix_table="staging.rate_matrix",
            channels_table="staging.channels",
            carriers_table="staging.carriers",
        )
        query = repository.build_query("WH-SZ", "US", 1, date(2026, 6, 1))
        assert "staging.rate_matrix rm" in query
        assert "staging.channels ch" in query
        assert "staging.carriers sc" in query

    def test_fetch_converts_rows(self, monkeypatch):
        queries = []
        rates = load_rate_matrix().filter(pl.col("rate_id").is_in(["R-1002", "R-1001"]))

        def fake_pull(query):
            queries.append(query)
            return rates

        monkeypatch.setattr(loaders, "pull_data", fake_pull)

        rows = loaders.DatabaseRateMatrixRepository().fetch_candidate_rates(
            "WH-SZ", "US", 2.0, on_date=date(2026, 6, 1)
        )

        assert [r.rate_id for r in rows] == ["R-1001", "R-1002"]
        assert rows[0].carrier_name == "DHL"
        assert rows[0].effective_until is None
        assert len(queries) == 1

    def test_fetch_no_rows(self, monkeypatch):
        monkeypatch.setattr(loaders, "pull_data", lambda query: pl.DataFrame())
        assert loaders.DatabaseRateMatrixRepository().fetch_candidate_rates("WH-SZ", "US", 1) == []

    def test_query_errors_propagate(self, monkeypatch):
        def failing_pull(query):
            raise RuntimeError("Error executing query: connection reset")

        monkeypatch.setattr(loaders, "pull_data", failing_pull)
        with pytest.raises(RuntimeError, match="connection reset"):
            loaders.DatabaseRateMatrixRepository().fetch_candidate_rates("WH-SZ", "US", 1)


# =============================================================================
# TESTS: SAVED QUOTES
# =============================================================================

class TestSavedQuotes:

    def test_save(self, monkeypatch, saved_quote):
        pushed = {}

        def fake_push(data, table_name, verbose=True):
            pushed["data"] = data
            pushed["table_name"] = table_name
            return len(data)

        monkeypatch.setattr(loaders, "push_data", fake_push)

        assert loaders.save_shipping_quotes([saved_quote]) == 1
        assert pushed["table_name"] == "sourcing.rfq_shipping_quotes"

        record = pushed["data"].row(0, named=True)
        assert record["rfq_id"] == "RFQ-1"
        assert record["total_freight"] == 15
        assert record["is_selected"] is False
        assert json.loads(record["calculation_details"])["min_charge"] == 15

    def test_save_nothing(self, monkeypatch):
        def fake_push(*args, **kwargs):
            raise AssertionError("push_data should not be called")

        monkeypatch.setattr(loaders, "push_data", fake_push)
        assert loaders.save_shipping_quotes([]) == 0

    def test_select_clears_previous_selection(self, monkeypatch):
        calls = []
        monkeypatch.setattr(
            loaders, "execute_query", lambda query, commit=True: calls.append((query, commit))
        )

        loaders.select_shipping_quote("RFQ-1", "Q-9")

        assert calls == [
            (
                "UPDATE sourcing.rfq_shipping_quotes SET is_selected = FALSE "
                "WHERE rfq_id = 'RFQ-1'",
                False,
            ),
            (
                "UPDATE sourcing.rfq_shipping_quotes SET is_selected = TRUE "
                "WHERE id = 'Q-9' AND rfq_id = 'RFQ-1'",
                True,
            ),
        ]

    def test_load_cheapest_first(self, monkeypatch):
        queries = []

        def fake_pull(query):
            queries.append(query)
            return pl.DataFrame()

        monkeypatch.setattr(loaders, "pull_data", fake_pull)
        loaders.load_shipping_quotes("RFQ-1")

        assert queries == [
            "SELECT * FROM sourcing.rfq_shipping_quotes "
            "WHERE rfq_id = 'RFQ-1' ORDER BY total_freight ASC"
        ]
