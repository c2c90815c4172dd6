from abc import ABC, abstractmethod
import logging

from src.dp.base.err_code import DPResult, ErrCode
from src.dp.base.record import Record, coerce, is_numeric
from src.dp.exceptions import ConfigurationError

logger = logging.getLogger("dp")


def check_record_class(record_cls) -> None:
    if not (isinstance(record_cls, type) and issubclass(record_cls, Record)):
        raise ConfigurationError(
            "Supplied class does not extend Record",
            details=repr(record_cls),
        )


def check_record(record) -> None:
    if not isinstance(record, Record):
        raise ConfigurationError(
            "Supplied object is not a Record",
            details=repr(record),
        )


class DataProvider(ABC):
    """
    DataProvider defines the CRUD contract for Record models.

    Concrete providers supply the primitives (fetch/insert/update/delete);
    the convenience operations below are written purely against them.

    Every operation returns a DPResult:
        ok=True                  -> succeeded
        err=NOT_FOUND            -> well formed, nothing matched / changed
        err=INVALID_REQUEST      -> not attempted, record state does not allow it
        err=STORE_ERROR          -> the store rejected the statement
    A value that is not a Record type raises ConfigurationError.
    """

    # =========================================================
    # Primitives
    # =========================================================

    @abstractmethod
    def fetch(self, record_cls, params=None, orders=None, count=None, start=0) -> DPResult:
        """
        Search for records of type record_cls matching params, ordered by
        orders and limited by count/start. On success value is a dict
        {pkey value: record} in store order (empty when nothing matched).
        """
        pass

    @abstractmethod
    def insert(self, record: Record) -> DPResult:
        pass

    @abstractmethod
    def update(self, record: Record) -> DPResult:
        pass

    def delete(self, record: Record) -> DPResult:
        """No generic delete: concrete providers must implement it."""
        return DPResult(ok=False, err=ErrCode.INVALID_REQUEST)

    # =========================================================
    # Convenience operations
    # =========================================================

    def by_pk(self, record_cls, pkey) -> DPResult:
        """
        Search for record(s) of type record_cls by primary key value(s).

        A scalar pkey yields the single record (or NOT_FOUND); a list of
        pkeys yields the {pkey: record} dict of whichever exist.
        """
        check_record_class(record_cls)
        pk_name = record_cls.get_pkey()
        pk_type = record_cls.field_type(pk_name)
        many = isinstance(pkey, (list, tuple, set))

        # Result keys are coerced pkey values, so the lookup key must be too
        try:
            if many:
                pkey = [coerce(pk_type, v) for v in pkey]
            else:
                pkey = coerce(pk_type, pkey)
        except (ValueError, TypeError, OverflowError):
            logger.warning("DP.by_pk invalid pkey: class=%s pkey=%r", record_cls.__name__, pkey)
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail=f"pkey is not a valid {pk_type.name}")

        result = self.fetch(record_cls, {pk_name: pkey})
        if not result.ok or many:
            return result

        if pkey not in result.value:
            return DPResult(ok=False, err=ErrCode.NOT_FOUND)
        return DPResult(ok=True, value=result.value[pkey])

    def provide(self, record_cls, pkey) -> DPResult:
        """
        Get or create the record of type record_cls with the given pkey.

        Not atomic: between the lookup and the insert another caller may
        insert the same key. Only a unique key on the table prevents the
        duplicate; the losing insert then comes back as STORE_ERROR.
        """
        if not is_numeric(pkey):
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="pkey is not numeric")
        check_record_class(record_cls)

        try:
            model = record_cls(pkey)
        except (ValueError, TypeError, OverflowError):
            logger.warning("DP.provide invalid pkey: class=%s pkey=%r", record_cls.__name__, pkey)
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="pkey does not fit the pkey field")
        key = model.pkey_value
        result = self.fetch(record_cls, {record_cls.get_pkey(): key})
        if not result.ok:
            return result
        if key in result.value:
            return DPResult(ok=True, value=result.value[key])

        logger.info("DP.provide create: class=%s pkey=%r", record_cls.__name__, key)
        inserted = self.insert(model)
        if not inserted.ok:
            return inserted
        return DPResult(ok=True, value=model)

    def load(self, record: Record) -> DPResult:
        """Load the record by its pkey if set, otherwise by its set values."""
        check_record(record)
        if record.pkey_value is None:
            return self.fill(record)
        return self.select(record)

    def select(self, record: Record) -> DPResult:
        check_record(record)
        if record.pkey_value is None:
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="pkey not set")

        result = self.fetch(type(record), {record.get_pkey(): record.pkey_value})
        if not result.ok:
            return result
        if not result.value:
            return DPResult(ok=False, err=ErrCode.NOT_FOUND)

        record.replace_with(next(iter(result.value.values())))
        return DPResult(ok=True, value=record)

    def fill(self, record: Record) -> DPResult:
        """Load the first row matching every non-null value of record."""
        check_record(record)
        params = {k: v for k, v in record.to_map().items() if v is not None}
        if not params:
            return DPResult(ok=False, err=ErrCode.INVALID_REQUEST, detail="no values set")

        result = self.fetch(type(record), params, None, 1, 0)
        if not result.ok:
            return result
        if not result.value:
            return DPResult(ok=False, err=ErrCode.NOT_FOUND)

        record.replace_with(next(iter(result.value.values())))
        return DPResult(ok=True, value=record)

    def save(self, record: Record) -> DPResult:
        check_record(record)
        if record.pkey_value is not None:
            return self.update(record)
        return self.insert(record)
