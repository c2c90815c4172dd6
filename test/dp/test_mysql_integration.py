"""
Round trips against a live MySQL (see scripts/create_database.py).
Skipped when the configured server is not reachable.
"""
import pymysql
import pytest

from src.dp.base.err_code import ErrCode
from src.dp.config import get_config
from src.dp.impl.mysql_data_provider import MySQLDataProvider
from src.dp.impl.pymysql_store import PyMySQLStore
from test.dp.helpers import User

SCHEMA = """
    CREATE TABLE IF NOT EXISTS users (
        user_id  INT NOT NULL AUTO_INCREMENT,
        name     VARCHAR(64) NULL,
        active   BIT(1) NULL,
        score    DOUBLE NULL,
        tags     JSON NULL,
        created  DATETIME NULL,
        PRIMARY KEY (user_id)
    )
"""


@pytest.fixture(scope="module")
def store():
    try:
        store = PyMySQLStore.connect(get_config())
    except pymysql.MySQLError:
        pytest.skip("MySQL not available for integration tests")
    with store.conn.cursor() as cur:
        cur.execute(SCHEMA)
        cur.execute("TRUNCATE TABLE users")
    yield store
    store.close()


@pytest.fixture
def dp(store):
    return MySQLDataProvider(store)


def test_insert_and_fetch_round_trip(dp):
    user = User()
    user.set("name", "A")
    user.set("active", True)
    user.set("tags", ["x", "y"])

    pk = dp.insert(user).value
    found = dp.by_pk(User, pk)

    assert found.ok
    assert found.value.get("name") == "A"
    assert found.value.get("active") is True
    assert found.value.get("tags") == ["x", "y"]


def test_update_select_delete(dp):
    user = User()
    user.set("name", "before")
    dp.insert(user)

    user.set("name", "after")
    assert dp.save(user).ok

    fresh = User(user.pkey_value)
    assert dp.select(fresh).ok
    assert fresh.get("name") == "after"

    assert dp.delete(fresh).value == 1
    assert dp.by_pk(User, user.pkey_value).err == ErrCode.NOT_FOUND


def test_in_expansion_and_provide(dp):
    ids = []
    for name in ("p", "q", "r"):
        user = User()
        user.set("name", name)
        ids.append(dp.insert(user).value)

    many = dp.by_pk(User, ids)
    assert sorted(many.value) == sorted(ids)

    provided = dp.provide(User, 4242)
    again = dp.provide(User, 4242)
    assert provided.ok and again.ok
    assert again.value.pkey_value == 4242
    assert len(dp.fetch(User, {"user_id": 4242}).value) == 1


def test_quotes_survive_round_trip(dp):
    user = User()
    user.set("name", "O'Brien \\ \"x\"")
    pk = dp.insert(user).value
    assert dp.by_pk(User, pk).value.get("name") == "O'Brien \\ \"x\""
