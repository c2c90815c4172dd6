"""
DataProvider Test Helper Functions
Shared record types and an in-memory fake Store for the provider tests.
"""
from pymysql.converters import escape_string

from src.dp.base.record import FieldSpec, FieldType, Record, define_record
from src.dp.base.store import Store
from src.dp.exceptions import StoreError
from src.dp.impl.mysql_data_provider import MySQLDataProvider


# ==================== Records ====================

class User(Record):
    table = "users"
    pkey = "user_id"
    fields = {
        "user_id": FieldType.INT,
        "name": FieldType.STRING,
        "active": FieldType.BOOL,
        "score": FieldType.FLOAT,
        "tags": FieldType.JSON,
        "created": FieldType.DATETIME,
    }


USER_SELECT = (
    "\nSELECT t.`user_id`, t.`name`, t.`active`, t.`score`, t.`tags`, t.`created`"
    "\nFROM `users` t"
)


class Account(Record):
    """Record with lifecycle hooks that touch fields."""
    table = "accounts"
    pkey = "account_id"
    fields = {
        "account_id": FieldType.INT,
        "email": FieldType.STRING,
        "status": FieldSpec(type=FieldType.STRING, default="new"),
        "revision": FieldType.INT,
    }

    def __init__(self, pkey_value=None):
        super().__init__(pkey_value)
        self.calls = []

    def before_insert(self):
        self.calls.append("insert")
        self.apply_defaults()

    def before_update(self):
        self.calls.append("update")
        self.set("revision", (self.get("revision") or 0) + 1)

    def before_delete(self):
        self.calls.append("delete")


Report = define_record(
    "Report",
    table="reports",
    pkey="report_id",
    fields={"report_id": "i", "title": "s"},
    query="\nSELECT t.`report_id`, t.`title`\nFROM `report_view` t",
)

Archive = define_record(
    "Archive",
    table="archive",
    pkey="archive_id",
    fields={"archive_id": "i", "body": "s"},
    source="archive",
)


def user_row(user_id, name="n", active=b"\x01", score=None, tags=None, created=None):
    return {
        "user_id": user_id,
        "name": name,
        "active": active,
        "score": score,
        "tags": tags,
        "created": created,
    }


# ==================== Fake store ====================

class FakeCursor:
    def __init__(self, rows=None, rowcount=0):
        self._rows = list(rows or [])
        self.rowcount = rowcount
        self.closed = False

    def fetchone(self):
        if not self._rows:
            return None
        return self._rows.pop(0)

    def close(self):
        self.closed = True


class FakeStore(Store):
    """
    Records every statement; answers from a queue of outcomes.

    An empty queue answers with an empty cursor.
    """

    def __init__(self):
        self.statements = []
        self.cursors = []
        self.outcomes = []
        self.insert_id = 0

    def queue_rows(self, *rows):
        self.outcomes.append(FakeCursor(rows, rowcount=len(rows)))

    def queue_rowcount(self, rowcount):
        self.outcomes.append(FakeCursor(rowcount=rowcount))

    def queue_failure(self, message="Duplicate entry"):
        self.outcomes.append(StoreError(details=message))

    def execute(self, sql):
        self.statements.append(sql)
        outcome = self.outcomes.pop(0) if self.outcomes else FakeCursor()
        if isinstance(outcome, StoreError):
            outcome.sql = sql
            raise outcome
        self.cursors.append(outcome)
        return outcome

    def escape(self, text):
        return escape_string(text)

    def last_insert_id(self):
        return self.insert_id


def new_provider(**kwargs):
    store = FakeStore()
    return MySQLDataProvider(store, **kwargs), store
