"""
Database Connection and Operations

Redshift access for the rate matrix and saved shipping quotes.
Shared by the repository loaders and the quote persistence helpers.
"""

import math
from pathlib import Path
from typing import Optional

import polars as pl
import redshift_connector


# Database connection parameters
HOST = "sourcing-bi.eu-central-1.redshift.amazonaws.com"
PORT = 5439
DBNAME = "sourcing"
USER = "rates_service"


# Global connection object
_connection: Optional[redshift_connector.Connection] = None


# ============================================================================
# CONNECTION MANAGEMENT
# ============================================================================

def _read_password() -> str:
    """
    Read password from pass.txt file in the database directory.

    Raises:
        RuntimeError: If password file is not found or is empty
    """
    path = Path(__file__).parent / "pass.txt"

    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                val = line.strip()
                if val:
                    return val

    raise RuntimeError(
        f"Password not found. Please create 'pass.txt' in {path.parent}"
    )


def get_connection(force_new: bool = False) -> redshift_connector.Connection:
    """
    Get or create a database connection.

    Returns the existing connection unless force_new is set, in which case
    the old one is closed first.

    Raises:
        RuntimeError: If connection cannot be established
    """
    global _connection

    if force_new:
        close_connection()

    if _connection is not None:
        return _connection

    try:
        _connection = redshift_connector.connect(
            host=HOST,
            database=DBNAME,
            port=PORT,
            user=USER,
            password=_read_password()
        )
        return _connection
    except redshift_connector.Error as e:
        raise RuntimeError(f"Failed to create database connection: {e}") from e


def close_connection() -> None:
    """Close the active database connection if one exists."""
    global _connection

    if _connection is not None:
        try:
            _connection.close()
        except redshift_connector.Error:
            pass
        finally:
            _connection = None


# ============================================================================
# DATA OPERATIONS
# ============================================================================

def pull_data(query: str) -> pl.DataFrame:
    """
    Execute a SQL query and return results as a polars DataFrame.

    Raises:
        RuntimeError: If query execution fails

    Example:
        df = pull_data("SELECT * FROM sourcing.rate_matrix WHERE is_active")
    """
    conn = get_connection()

    try:
        cursor = conn.cursor()
        cursor.execute(query)

        columns = [desc[0] for desc in cursor.description]
        rows = cursor.fetchall()
        cursor.close()
    except redshift_connector.Error as e:
        raise RuntimeError(f"Error executing query: {e}") from e

    return pl.DataFrame(rows, schema=columns, orient="row")


def execute_query(query: str, commit: bool = True) -> None:
    """
    Execute a SQL statement without returning results (UPDATE, DELETE, ...).

    Args:
        query: SQL statement to execute
        commit: If True, commit the transaction; if False, you must commit manually

    Raises:
        RuntimeError: If execution fails
    """
    conn = get_connection()

    try:
        cursor = conn.cursor()
        cursor.execute(query)
        if commit:
            conn.commit()
        cursor.close()
    except redshift_connector.Error as e:
        conn.rollback()
        raise RuntimeError(f"Error executing query: {e}") from e


def format_value(value) -> str:
    """Format a Python value as a SQL literal."""
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "NULL"
    elif isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    elif isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    elif hasattr(value, "isoformat"):  # date/datetime
        return "'" + value.isoformat() + "'"
    else:
        return str(value)


def push_data(
    data: pl.DataFrame,
    table_name: str,
    batch_size: int = 5000,
    verbose: bool = True
) -> int:
    """
    Append a DataFrame to an existing Redshift table.

    Args:
        data: Rows to insert; column names must match the table
        table_name: Full table name (e.g., "schema.table_name")
        batch_size: Number of rows per INSERT statement
        verbose: If True, print progress messages

    Returns:
        Number of rows inserted

    Raises:
        ValueError: If table_name has no schema
        RuntimeError: If upload fails
    """
    if "." not in table_name:
        raise ValueError(
            f"table_name must include schema: 'schema.table_name', got '{table_name}'"
        )

    columns = data.columns
    rows = data.rows()
    total_rows = len(rows)

    if total_rows == 0:
        if verbose:
            print("Warning: DataFrame is empty, nothing to upload")
        return 0

    conn = get_connection()
    column_list = ", ".join(columns)
    batches = (total_rows + batch_size - 1) // batch_size

    if verbose:
        print(f"Uploading {total_rows:,} rows to {table_name} in {batches} batch(es)...")

    try:
        cursor = conn.cursor()

        for batch_idx in range(batches):
            start_idx = batch_idx * batch_size
            end_idx = min(start_idx + batch_size, total_rows)

            values_list = [
                "(" + ", ".join(format_value(v) for v in row) + ")"
                for row in rows[start_idx:end_idx]
            ]
            cursor.execute(
                f"INSERT INTO {table_name} ({column_list}) VALUES {', '.join(values_list)}"
            )

            if verbose:
                print(f"  Batch {batch_idx + 1}/{batches}: rows {start_idx + 1:,}-{end_idx:,}")

        conn.commit()  # Single commit at end
        cursor.close()
    except redshift_connector.Error as e:
        conn.rollback()
        raise RuntimeError(f"Error uploading data: {e}") from e

    if verbose:
        print(f"Successfully uploaded {total_rows:,} rows to {table_name}")

    return total_rows


__all__ = [
    "get_connection",
    "close_connection",
    "pull_data",
    "execute_query",
    "format_value",
    "push_data",
]
