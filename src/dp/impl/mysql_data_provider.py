import logging
from typing import Dict, Optional

from src.dp.base.data_provider import DataProvider, check_record, check_record_class
from src.dp.base.err_code import DPResult, ErrCode
from src.dp.base.record import Record
from src.dp.base.store import Store
from src.dp.config import get_config
from src.dp.exceptions import StoreError
from src.dp.impl import query_builder as qb

logger = logging.getLogger("dp")


class MySQLDataProvider(DataProvider):
    def __init__(
        self,
        store: Store,
        sources: Optional[Dict[str, Store]] = None,
        log_sql: Optional[bool] = None,
    ):
        """
        store   : default Store every record type uses
        sources : named Stores for record types that declare `source`
        log_sql : log generated statements (defaults to config.log_sql)
        """
        self.store = store
        self.sources = dict(sources or {})
        self.log_sql = get_config().log_sql if log_sql is None else log_sql

        logger.info(
            "MySQLDataProvider initialized: store=%s sources=%s",
            type(store).__name__,
            sorted(self.sources),
        )

    # =========================================================
    # Internal helper methods
    # =========================================================

    def _store_for(self, record_cls) -> Store:
        source = record_cls.get_source()
        if not source:
            return self.store
        store = self.sources.get(source)
        if store is None:
            logger.warning(
                "DP.store_for: unknown source=%s for class=%s, using default store",
                source, record_cls.__name__
            )
            return self.store
        return store

    def _execute(self, store: Store, sql: str):
        """Run sql; returns (cursor, None) or (None, failure result)."""
        if self.log_sql:
            logger.debug("DP SQL: %s", sql)
        try:
            return store.execute(sql), None
        except StoreError as e:
            logger.warning("DP.execute failed: err=%s", e.details)
            return None, DPResult(ok=False, err=ErrCode.STORE_ERROR, detail=e.details)

    # =========================================================
    # Read
    # =========================================================

    def fetch(self, record_cls, params=None, orders=None, count=None, start=0) -> DPResult:
        check_record_class(record_cls)
        store = self._store_for(record_cls)
        pk_name = record_cls.get_pkey()

        try:
            sql = qb.build_select(record_cls, params, orders, count, start, store.escape)
        except (ValueError, TypeError, OverflowError) as e:
            # A constraint value the field type cannot hold
            logger.warning("DP.fetch invalid params: class=%s err=%s", record_cls.__name__, e)
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail=str(e))
        cursor, failure = self._execute(store, sql)
        if failure is not None:
            return failure

        records = {}
        try:
            row = cursor.fetchone()
            while row is not None:
                record = record_cls()
                record.load_row(row)
                records[record.get(pk_name)] = record
                row = cursor.fetchone()
        finally:
            cursor.close()

        logger.debug(
            "DP.fetch done: class=%s records=%d",
            record_cls.__name__, len(records)
        )
        return DPResult(ok=True, value=records)

    # =========================================================
    # Write
    # =========================================================

    def _write_insert(self, record: Record, upsert: bool) -> DPResult:
        check_record(record)
        # If no fields were set, this is unexpected
        if not record.diff():
            logger.warning("DP.insert invalid: class=%s empty diff", type(record).__name__)
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="no changed fields")

        record.before_insert()
        values = record.diff()
        if not values:
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="no changed fields")
        pk_name = record.get_pkey()
        if upsert and record.pkey_value is not None:
            # The UPDATE arm needs the key to match on
            values[pk_name] = record.pkey_value

        store = self._store_for(type(record))
        fields = record.get_field_list()
        if upsert:
            sql = qb.build_upsert(record.get_table(), fields, values, store.escape)
        else:
            sql = qb.build_insert(record.get_table(), fields, values, store.escape)

        cursor, failure = self._execute(store, sql)
        if failure is not None:
            return failure
        cursor.close()

        new_id = store.last_insert_id()
        if new_id:
            record.set(pk_name, new_id)
        record.commit_diff()

        logger.info(
            "DP.%s: table=%s pkey=%r fields=%s",
            "insert_update" if upsert else "insert",
            record.get_table(), record.pkey_value, list(values)
        )
        return DPResult(ok=True, value=record.pkey_value)

    def insert(self, record: Record) -> DPResult:
        return self._write_insert(record, upsert=False)

    def insert_update(self, record: Record) -> DPResult:
        return self._write_insert(record, upsert=True)

    def update(self, record: Record) -> DPResult:
        check_record(record)
        # If the pkey is not set, what would we update?
        if record.pkey_value is None:
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="pkey not set")
        if not record.diff():
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="no changed fields")

        record.before_update()
        values = record.diff()
        if record.pkey_value is None or not values:
            logger.error(
                "DP.update invalid after before_update: class=%s pkey=%r",
                type(record).__name__, record.pkey_value
            )
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="before_update cleared pkey or diff")

        store = self._store_for(type(record))
        sql = qb.build_update(
            record.get_table(),
            record.get_field_list(),
            values,
            record.get_pkey(),
            record.pkey_value,
            store.escape,
        )
        cursor, failure = self._execute(store, sql)
        if failure is not None:
            return failure
        cursor.close()

        record.commit_diff()
        logger.info(
            "DP.update: table=%s pkey=%r fields=%s",
            record.get_table(), record.pkey_value, list(values)
        )
        return DPResult(ok=True, value=True)

    def delete(self, record: Record) -> DPResult:
        check_record(record)
        if record.pkey_value is None:
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="pkey not set")

        record.before_delete()
        store = self._store_for(type(record))
        sql = qb.build_delete(
            record.get_table(),
            record.get_field_list(),
            record.get_pkey(),
            record.pkey_value,
            store.escape,
        )
        cursor, failure = self._execute(store, sql)
        if failure is not None:
            return failure
        affected = cursor.rowcount
        cursor.close()

        logger.info(
            "DP.delete: table=%s pkey=%r affected=%s",
            record.get_table(), record.pkey_value, affected
        )
        return DPResult(ok=True, value=affected)
