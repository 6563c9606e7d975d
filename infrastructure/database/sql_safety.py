"""
Column allow-lists for dynamically built SQL.

Garden tables accept partial dicts from the service layer (an update only
carries the fields the client sent). Column names therefore end up
interpolated into SQL, so every table declares a :class:`ColumnSet` and
only its listed identifiers ever reach a statement. Values always travel
as ``?`` parameters.

Usage::

    AREAS = ColumnSet("Areas", "area_id", {"name", "emoji"})

    sql, params = AREAS.insert_sql(area, context="insert_area")
    db.execute(sql, params)

    statement = AREAS.update_sql(area_id, fields, context="update_area")
    if statement:
        db.execute(*statement)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Not a plain SQL identifier: {name!r}")
    return name


@dataclass(frozen=True)
class ColumnSet:
    """Writable columns of one table plus its primary key column."""

    table: str
    key: str
    columns: Iterable[str]

    def __post_init__(self) -> None:
        _check_identifier(self.table)
        _check_identifier(self.key)
        object.__setattr__(self, "columns", frozenset(_check_identifier(c) for c in self.columns))

    def pick(self, data: dict[str, Any], *, context: str = "") -> dict[str, Any]:
        """Keep only the allowed keys of *data*; anything else is logged and dropped."""
        picked = {k: v for k, v in data.items() if k in self.columns}
        dropped = sorted(set(data) - set(picked))
        if dropped:
            logger.warning("%s: ignoring unknown %s column(s) %s", context or self.table, self.table, dropped)
        return picked

    def insert_sql(self, data: dict[str, Any], *, context: str = "") -> tuple[str, list[Any]]:
        cols = self.pick(data, context=context)
        if not cols:
            raise ValueError(f"Nothing to insert into {self.table}")
        names = ", ".join(cols)
        marks = ", ".join("?" for _ in cols)
        return f"INSERT INTO {self.table} ({names}) VALUES ({marks})", list(cols.values())

    def update_sql(self, key_value: Any, data: dict[str, Any], *, context: str = "") -> tuple[str, list[Any]] | None:
        """``UPDATE`` for the allowed fields of *data*, or None when none remain."""
        cols = self.pick(data, context=context)
        if not cols:
            return None
        assignments = ", ".join(f"{name} = ?" for name in cols)
        return (
            f"UPDATE {self.table} SET {assignments} WHERE {self.key} = ?",
            [*cols.values(), key_value],
        )
