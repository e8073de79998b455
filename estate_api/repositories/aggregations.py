"""
Shared building blocks for grouped statistics queries.
"""

from sqlalchemy import extract, Integer, cast
from sqlalchemy.sql.elements import ColumnElement
from typing import Tuple


def year_month(column) -> Tuple[ColumnElement, ColumnElement]:
    """
    Year and month expressions for a timestamp column.

    Cast to integer so PostgreSQL (numeric) and SQLite (text) agree on the
    result type.
    """
    year = cast(extract("year", column), Integer).label("year")
    month = cast(extract("month", column), Integer).label("month")
    return year, month


def newest_months_first(query, year: ColumnElement, month: ColumnElement, limit: int):
    """Group ``query`` by calendar month, newest bucket first, keeping ``limit`` buckets."""
    return (
        query
        .group_by(year, month)
        .order_by(year.desc(), month.desc())
        .limit(limit)
    )
