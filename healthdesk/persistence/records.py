"""Generic record operations over the domain tables.

Every user-owned mutation filters on ``(id, user_id)`` in the same statement,
so a record that belongs to someone else looks exactly like a missing one.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Sequence

from healthdesk.errors import NotFound
from healthdesk.persistence.schema import Table
from healthdesk.persistence.store import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Join:
    """Left join of a reference table, nested into the result under ``alias``."""

    table: Table
    local_key: str
    alias: str
    columns: tuple[str, ...]


class RecordStore:
    """Async CRUD over ``Table`` definitions."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def insert(self, table: Table, values: Mapping[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored."""
        columns = list(values)
        _check_columns(table, columns)
        sql = (
            f"INSERT INTO {table.name} ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})"
        )
        conn = await self.db.connection()
        cursor = await conn.execute(sql, _encode_values(table, values))
        await conn.commit()
        row = await self.get(table, cursor.lastrowid)
        assert row is not None
        return row

    async def insert_many(
        self, table: Table, rows: Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        return [await self.insert(table, values) for values in rows]

    async def get(self, table: Table, record_id: int | None) -> dict[str, Any] | None:
        rows = await self.select(table, {"id": record_id})
        return rows[0] if rows else None

    async def select(
        self,
        table: Table,
        where: Mapping[str, Any] | None = None,
        joins: Sequence[Join] = (),
    ) -> list[dict[str, Any]]:
        """Select rows matching every ``where`` column, ordered by id."""
        where = where or {}
        _check_columns(table, where)
        select_cols = [f"t.{c}" for c in table.columns]
        from_sql = f"{table.name} t"
        for i, join in enumerate(joins):
            alias = f"j{i}"
            _check_columns(table, [join.local_key])
            _check_columns(join.table, join.columns)
            select_cols += [f"{alias}.{c} AS {join.alias}__{c}" for c in join.columns]
            from_sql += (
                f" LEFT JOIN {join.table.name} {alias} ON {alias}.id = t.{join.local_key}"
            )
        sql = f"SELECT {', '.join(select_cols)} FROM {from_sql}"
        if where:
            sql += " WHERE " + " AND ".join(f"t.{c} = ?" for c in where)
        sql += " ORDER BY t.id ASC"

        conn = await self.db.connection()
        cursor = await conn.execute(sql, _encode_values(table, where))
        rows = await cursor.fetchall()
        return [_decode_row(table, dict(r), joins) for r in rows]

    async def get_owned(
        self, table: Table, record_id: int, user_id: str, not_found: str = "Record not found"
    ) -> dict[str, Any]:
        """Read one owned record; missing and not-yours both raise NotFound."""
        owner = _owner_column(table)
        rows = await self.select(table, {"id": record_id, owner: user_id})
        if not rows:
            raise NotFound(not_found)
        return rows[0]

    async def list_owned(
        self, table: Table, user_id: str, joins: Sequence[Join] = ()
    ) -> list[dict[str, Any]]:
        return await self.select(table, {_owner_column(table): user_id}, joins=joins)

    async def update_owned(
        self,
        table: Table,
        record_id: int,
        user_id: str,
        changes: Mapping[str, Any],
        not_found: str = "Record not found or not yours",
    ) -> dict[str, Any]:
        """Apply ``changes`` to one owned record and return the updated row."""
        owner = _owner_column(table)
        columns = list(changes)
        _check_columns(table, columns)
        sql = (
            f"UPDATE {table.name} SET {', '.join(f'{c} = ?' for c in columns)} "
            f"WHERE id = ? AND {owner} = ?"
        )
        params = _encode_values(table, changes) + (record_id, user_id)
        conn = await self.db.connection()
        cursor = await conn.execute(sql, params)
        await conn.commit()
        if cursor.rowcount == 0:
            raise NotFound(not_found)
        row = await self.get(table, record_id)
        if row is None:
            raise NotFound(not_found)
        return row


def _owner_column(table: Table) -> str:
    if table.owner_column is None:
        raise ValueError(f"Table {table.name} has no owner column")
    return table.owner_column


def _check_columns(table: Table, columns: Any) -> None:
    unknown = [c for c in columns if not table.has_column(c)]
    if unknown:
        raise ValueError(f"Unknown column(s) for {table.name}: {', '.join(unknown)}")


def _encode_value(table: Table, column: str, value: Any) -> Any:
    if value is None:
        return None
    if column in table.json_columns:
        return json.dumps(value)
    if column in table.bool_columns:
        return int(bool(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _encode_values(table: Table, values: Mapping[str, Any]) -> tuple[Any, ...]:
    return tuple(_encode_value(table, c, v) for c, v in values.items())


def _decode_columns(table: Table, row: dict[str, Any]) -> dict[str, Any]:
    for column in table.json_columns:
        if row.get(column) is not None:
            row[column] = json.loads(row[column])
    for column in table.bool_columns:
        if column in row and row[column] is not None:
            row[column] = bool(row[column])
    return row


def _decode_row(
    table: Table, raw: dict[str, Any], joins: Sequence[Join]
) -> dict[str, Any]:
    row = _decode_columns(table, {c: raw[c] for c in table.columns})
    for join in joins:
        nested = {c: raw[f"{join.alias}__{c}"] for c in join.columns}
        if all(v is None for v in nested.values()):
            row[join.alias] = None
        else:
            row[join.alias] = _decode_columns(join.table, nested)
    return row
