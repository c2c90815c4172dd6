import pymysql
import pymysql.cursors
import logging
from typing import Optional

from src.dp.base.store import Store
from src.dp.config import DPConfig, get_config
from src.dp.exceptions import StoreError

logger = logging.getLogger("dp")


class PyMySQLStore(Store):
    def __init__(self, conn: pymysql.connections.Connection, name: str = "default"):
        """
        conn : MySQL connection (DictCursor rows expected)
        name : label used in log lines
        """
        self.conn = conn
        self.name = name

        logger.info("Store initialized: name=%s host=%s", name, conn.host)

    @classmethod
    def connect(cls, cfg: Optional[DPConfig] = None, name: str = "default") -> "PyMySQLStore":
        cfg = cfg or get_config()
        conn = pymysql.connect(
            host=cfg.mysql_host,
            port=cfg.mysql_port,
            user=cfg.mysql_user,
            password=cfg.mysql_password,
            database=cfg.mysql_database,
            charset=cfg.mysql_charset,
            autocommit=cfg.mysql_autocommit,
            connect_timeout=cfg.mysql_connect_timeout,
            cursorclass=pymysql.cursors.DictCursor,
        )
        return cls(conn, name=name)

    def execute(self, sql: str):
        cursor = self.conn.cursor(pymysql.cursors.DictCursor)
        try:
            cursor.execute(sql)
        except pymysql.MySQLError as e:
            cursor.close()
            logger.warning("Store.execute failed: store=%s err=%s", self.name, e)
            raise StoreError(details=str(e), sql=sql) from e
        return cursor

    def escape(self, text: str) -> str:
        return self.conn.escape_string(text)

    def last_insert_id(self) -> int:
        return self.conn.insert_id()

    def close(self) -> None:
        if self.conn.open:
            self.conn.close()
            logger.info("Store closed: name=%s", self.name)
