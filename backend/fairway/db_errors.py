"""Classify database errors raised underneath the store client."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

_MISSING_TABLE_SQLSTATES = {"42P01"}
_MISSING_COLUMN_SQLSTATES = {"42703"}


def _original_message(exc: SQLAlchemyError) -> str | None:
    orig = getattr(exc, "orig", None)
    if orig is None:
        return None
    return str(orig).lower()


def is_missing_table_error(exc: SQLAlchemyError, table_name: str) -> bool:
    """Return ``True`` if ``exc`` says ``table_name`` does not exist."""

    message = _original_message(exc)
    if message is None:
        return False
    if getattr(exc.orig, "sqlstate", None) in _MISSING_TABLE_SQLSTATES:
        return True
    if table_name.lower() not in message:
        return False
    return "no such table" in message or "does not exist" in message


def is_missing_column_error(
    exc: SQLAlchemyError, column_name: str | None = None
) -> bool:
    """Return ``True`` if ``exc`` says a column does not exist.

    ``column_name`` narrows the match to errors mentioning that column, e.g.
    ``"clubhouse_password"`` on databases that predate the clubhouse feature.
    PostgreSQL reports ``column ... does not exist``; SQLite reports
    ``no such column``.
    """

    message = _original_message(exc)
    if message is None:
        return False
    if column_name and column_name.lower() not in message:
        return False
    if getattr(exc.orig, "sqlstate", None) in _MISSING_COLUMN_SQLSTATES:
        return True
    if "no such column" in message:
        return True
    return "column" in message and "does not exist" in message
