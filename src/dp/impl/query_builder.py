"""
Statement builders for the MySQL data provider.

Every value reaching a statement goes through sql_literal(), which is the
only place a Python value becomes SQL text. Identifiers come from record
metadata, never from caller input: unknown fields in constraints and
orderings are dropped before any text is produced.
"""

import json
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from src.dp.base.record import OPAQUE_TYPES, FieldType, Record, is_numeric

Escape = Callable[[str], str]

RAND_ORDER = "rand()"

_LIST_TYPES = (list, tuple, set, frozenset)


def quote_ident(name: str) -> str:
    return f"`{name}`"


def sql_literal(field_type: FieldType, value: Any, escape: Escape) -> str:
    if value is None:
        return "NULL"
    if field_type is FieldType.BOOL:
        return "b'1'" if value else "b'0'"

    if field_type in (FieldType.ARRAY, FieldType.JSON, FieldType.OBJECT):
        text = json.dumps(value)
    elif isinstance(value, datetime):
        text = value.isoformat(sep=" ")
    elif isinstance(value, date):
        text = value.isoformat()
    elif isinstance(value, bool):
        text = "1" if value else "0"
    else:
        text = str(value)
    return "'" + escape(text) + "'"


# =========================================================
# SELECT
# =========================================================

def build_where(record_cls: type, params: Optional[Mapping[str, Any]], escape: Escape) -> List[str]:
    """
    Predicates for the given constraints, in constraint order.

    Values are normalized by assigning them to a scratch record and reading
    them back, so the record's own coercion rules apply.
    """
    if not params:
        return []
    fields = record_cls.get_field_list()
    scratch: Record = record_cls()
    predicates = []

    for key, val in params.items():
        if key not in fields:
            # Skip invalid field
            continue
        ftype = fields[key].type
        column = "t." + quote_ident(key)

        if isinstance(val, _LIST_TYPES) and ftype not in OPAQUE_TYPES:
            literals = []
            for item in val:
                scratch.set(key, item)
                literals.append(sql_literal(ftype, scratch.get(key), escape))
            if not literals:
                literals = ["NULL"]
            predicates.append(f"{column} IN ({', '.join(literals)})")
            continue

        scratch.set(key, val)
        val = scratch.get(key)
        if val is None:
            predicates.append(f"{column} IS NULL")
        else:
            predicates.append(f"{column} = {sql_literal(ftype, val, escape)}")

    return predicates


def make_order_by(orders: Optional[Mapping[str, Any]], valids: Sequence[str]) -> str:
    """
    ORDER BY clause from {field: direction}.

    True / "asc" sort ascending, False / "desc" descending, anything else
    leaves the direction to the database. "rand()" always passes through;
    other fields not in valids are dropped.
    """
    if not orders or not valids:
        return ""

    parts = []
    for field, asc in orders.items():
        if asc is False or (isinstance(asc, str) and asc.lower() == "desc"):
            direction = "DESC"
        elif asc is True or (isinstance(asc, str) and asc.lower() == "asc"):
            direction = "ASC"
        else:
            direction = ""

        if field == RAND_ORDER:
            parts.append(f"RAND() {direction}".rstrip())
        elif field in valids:
            parts.append(f"{quote_ident(field)} {direction}".rstrip())

    if not parts:
        return ""
    return "\nORDER BY " + ",".join(parts)


def build_select(
    record_cls: type,
    params: Optional[Mapping[str, Any]],
    orders: Optional[Mapping[str, Any]],
    count: Any,
    start: Any,
    escape: Escape,
) -> str:
    keys = list(record_cls.get_field_list().keys())
    predicates = build_where(record_cls, params, escape)

    query = record_cls.get_query()
    if query == "":
        query = (
            "\nSELECT t." + ", t.".join(quote_ident(k) for k in keys)
            + "\nFROM " + quote_ident(record_cls.get_table()) + " t"
        )

    if predicates:
        query += "\nWHERE " + "\n    AND ".join(predicates)
    query += "\nGROUP BY t." + quote_ident(record_cls.get_pkey())
    query += make_order_by(orders, keys)
    if is_numeric(count) and is_numeric(start):
        query += f"\nLIMIT {int(float(start))},{int(float(count))}"
    return query


# =========================================================
# Writes
# =========================================================

def _render_values(fields: Mapping[str, Any], values: Dict[str, Any], escape: Escape) -> List[str]:
    return [sql_literal(fields[key].type, val, escape) for key, val in values.items()]


def build_insert(table: str, fields: Mapping[str, Any], values: Dict[str, Any], escape: Escape) -> str:
    return (
        "INSERT INTO " + quote_ident(table)
        + " (" + ", ".join(quote_ident(k) for k in values) + ")"
        + "\nVALUES (" + ", ".join(_render_values(fields, values, escape)) + ")"
    )


def build_upsert(table: str, fields: Mapping[str, Any], values: Dict[str, Any], escape: Escape) -> str:
    literals = _render_values(fields, values, escape)
    updates = [f"{quote_ident(k)} = {lit}" for k, lit in zip(values, literals)]
    return (
        "INSERT INTO " + quote_ident(table)
        + " (" + ", ".join(quote_ident(k) for k in values) + ")"
        + "\nVALUES (" + ", ".join(literals) + ")"
        + "\nON DUPLICATE KEY UPDATE " + ", ".join(updates)
    )


def _pkey_predicate(fields: Mapping[str, Any], pkey: str, pkey_value: Any, escape: Escape) -> str:
    return f"\nWHERE {quote_ident(pkey)} = {sql_literal(fields[pkey].type, pkey_value, escape)}"


def build_update(
    table: str,
    fields: Mapping[str, Any],
    values: Dict[str, Any],
    pkey: str,
    pkey_value: Any,
    escape: Escape,
) -> str:
    literals = _render_values(fields, values, escape)
    assignments = [f"{quote_ident(k)} = {lit}" for k, lit in zip(values, literals)]
    return (
        "UPDATE " + quote_ident(table) + " SET " + ", ".join(assignments)
        + _pkey_predicate(fields, pkey, pkey_value, escape)
    )


def build_delete(table: str, fields: Mapping[str, Any], pkey: str, pkey_value: Any, escape: Escape) -> str:
    return "DELETE FROM " + quote_ident(table) + _pkey_predicate(fields, pkey, pkey_value, escape)
