from src.dp.base.err_code import ErrCode
from src.dp.exceptions import (
    InvalidRequestError,
    RecordNotFoundError,
    StoreError,
)

ERR_EXC_MAP = {
    ErrCode.NOT_FOUND: RecordNotFoundError,
    ErrCode.INVALID_REQUEST: InvalidRequestError,
    ErrCode.STORE_ERROR: StoreError,
}

def handle_dp_result(res):
    if res.ok:
        return res.value
    exc_cls = ERR_EXC_MAP.get(res.err, StoreError)
    raise exc_cls(details=res.detail or res.err.name)
