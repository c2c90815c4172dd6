"""
Record contract consumed by the data providers.

A Record subclass describes one table: its name, primary key, typed field
list and an optional raw query override. Instances hold the current field
values plus the values last loaded from or persisted to the store; the
difference between the two is the record's diff.
"""

import json
import math
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, Optional

from pydantic import BaseModel, Field

from src.dp.exceptions import ConfigurationError


class FieldType(str, Enum):
    """Field type tags."""
    INT = "i"
    BOOL = "b"
    FLOAT = "f"
    STRING = "s"
    DATETIME = "dt"
    ARRAY = "a"
    JSON = "j"
    OBJECT = "o"


# Never expanded into IN (...) when given a list of candidate values
OPAQUE_TYPES = frozenset({FieldType.ARRAY, FieldType.JSON, FieldType.OBJECT, FieldType.BOOL})

_FALSE_STRINGS = frozenset({"", "0", "false", "no", "off"})


class FieldSpec(BaseModel):
    """Declared metadata of one record field."""
    type: FieldType = Field(default=FieldType.STRING, description="Type tag")
    default: Any = Field(default=None, description="Value applied by apply_defaults()")


def coerce(field_type: FieldType, value: Any, from_store: bool = False) -> Any:
    """
    Coerce a value to the Python representation of a field type.

    None always stays None. Values that cannot represent the type raise
    ValueError, TypeError or OverflowError.

    Opaque types decode JSON text only when it comes from the store (bytes,
    or from_store=True); a str assigned by a caller is a JSON string value.
    """
    if value is None:
        return None

    if field_type is FieldType.INT:
        if isinstance(value, (bytes, bytearray)):
            value = value.decode()
        if isinstance(value, str):
            value = value.strip()
            try:
                return int(value)
            except ValueError:
                return int(float(value))
        return int(value)

    if field_type is FieldType.FLOAT:
        if isinstance(value, (bytes, bytearray)):
            value = value.decode()
        return float(value)

    if field_type is FieldType.BOOL:
        # BIT(1) columns come back from the driver as b'\x00' / b'\x01'
        if isinstance(value, (bytes, bytearray)):
            return any(value)
        if isinstance(value, str):
            return value.strip().lower() not in _FALSE_STRINGS
        return bool(value)

    if field_type is FieldType.DATETIME:
        if isinstance(value, (datetime, date)):
            return value
        if isinstance(value, (bytes, bytearray)):
            value = value.decode()
        return datetime.fromisoformat(str(value))

    if field_type in (FieldType.ARRAY, FieldType.JSON, FieldType.OBJECT):
        if isinstance(value, (bytes, bytearray)):
            value = json.loads(value.decode())
        elif from_store and isinstance(value, str):
            value = json.loads(value)
        if field_type is FieldType.ARRAY and isinstance(value, tuple):
            value = list(value)
        return value

    if isinstance(value, (bytes, bytearray)):
        return value.decode()
    return str(value)


def is_numeric(value: Any) -> bool:
    """Finite numbers and numeric strings; bools, nan and inf are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    if isinstance(value, (float, Decimal, str)):
        try:
            return math.isfinite(float(value))
        except ValueError:
            return False
    return False


def _as_spec(spec) -> FieldSpec:
    if isinstance(spec, FieldSpec):
        return spec
    if isinstance(spec, dict):
        return FieldSpec(**spec)
    return FieldSpec(type=FieldType(spec))


class Record:
    """
    Base class of all persisted records.

    Subclasses set the class attributes; `fields` accepts FieldSpec
    instances, plain dicts or bare type tags and is normalized to FieldSpec.

    Dirty tracking compares current values with the persisted baseline:
    assigning the value a field already holds does not mark it dirty, and
    assigning the original value back clears it from the diff.
    """

    table: ClassVar[str] = ""
    pkey: ClassVar[str] = ""
    fields: ClassVar[Dict[str, FieldSpec]] = {}
    query: ClassVar[str] = ""
    source: ClassVar[Optional[str]] = None

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if not cls.fields:
            return
        cls.fields = {name: _as_spec(spec) for name, spec in cls.fields.items()}
        if cls.pkey not in cls.fields:
            raise ConfigurationError(
                f"Record {cls.__name__} primary key not among its fields",
                details=f"pkey={cls.pkey!r} fields={list(cls.fields)}",
            )

    def __init__(self, pkey_value=None):
        if not self.fields:
            raise ConfigurationError(f"Record {type(self).__name__} declares no fields")
        self._vals: Dict[str, Any] = {name: None for name in self.fields}
        self._db_vals: Dict[str, Any] = dict(self._vals)
        if pkey_value is not None:
            self.set(self.pkey, pkey_value)

    # =========================================================
    # Metadata
    # =========================================================

    @classmethod
    def get_field_list(cls) -> Dict[str, FieldSpec]:
        return cls.fields

    @classmethod
    def get_pkey(cls) -> str:
        return cls.pkey

    @classmethod
    def get_table(cls) -> str:
        return cls.table

    @classmethod
    def get_query(cls) -> str:
        return cls.query or ""

    @classmethod
    def get_source(cls) -> Optional[str]:
        return cls.source

    @classmethod
    def field_type(cls, name: str) -> FieldType:
        return cls.fields[name].type

    # =========================================================
    # Values
    # =========================================================

    def get(self, name: str):
        if name not in self._vals:
            raise KeyError(f"{type(self).__name__} has no field {name!r}")
        return self._vals[name]

    def set(self, name: str, value) -> None:
        if name not in self._vals:
            raise KeyError(f"{type(self).__name__} has no field {name!r}")
        self._vals[name] = coerce(self.fields[name].type, value)

    __getitem__ = get
    __setitem__ = set

    @property
    def pkey_value(self):
        return self._vals[self.pkey]

    def to_map(self) -> Dict[str, Any]:
        return dict(self._vals)

    def diff(self) -> Dict[str, Any]:
        return {
            name: value
            for name, value in self._vals.items()
            if value != self._db_vals[name]
        }

    def commit_diff(self) -> None:
        self._db_vals = dict(self._vals)

    def load_row(self, row: Dict[str, Any]) -> None:
        """Hydrate from a store row; unknown columns are ignored."""
        for name, value in row.items():
            if name in self._vals:
                self._vals[name] = coerce(self.fields[name].type, value, from_store=True)
        self.commit_diff()

    def replace_with(self, other: "Record") -> None:
        """Take over another record's values and baseline."""
        self._vals = dict(other._vals)
        self._db_vals = dict(other._db_vals)

    def apply_defaults(self) -> None:
        for name, spec in self.fields.items():
            if self._vals[name] is None and spec.default is not None:
                self.set(name, spec.default)

    # =========================================================
    # Lifecycle hooks
    # =========================================================

    def before_insert(self) -> None:
        pass

    def before_update(self) -> None:
        pass

    def before_delete(self) -> None:
        pass

    def __repr__(self):
        return f"<{type(self).__name__} {self.pkey}={self.pkey_value!r}>"


def define_record(
    name: str,
    table: str,
    pkey: str,
    fields: Dict[str, Any],
    query: str = "",
    source: Optional[str] = None,
) -> type:
    """Build a concrete Record subclass from a schema description."""
    return type(
        name,
        (Record,),
        {
            "table": table,
            "pkey": pkey,
            "fields": dict(fields),
            "query": query,
            "source": source,
        },
    )
