import enum


class ErrCode(enum.Enum):
    SUCCESS = 0

    # ---------- Legitimate negatives (request was well formed) ----------
    NOT_FOUND = 10               # no matching row, nothing produced

    # ---------- Caller errors (never reached the store) ----------
    INVALID_REQUEST = 20         # pkey required but unset, empty diff, bad pkey

    # ---------- Storage ----------
    STORE_ERROR = 40             # statement execution failed


class DPResult:
    def __init__(self, ok: bool, value=None, err=ErrCode.SUCCESS, detail=None):
        self.ok = ok
        self.value = value
        self.err = err
        self.detail = detail

    @property
    def not_found(self) -> bool:
        return self.err is ErrCode.NOT_FOUND

    @property
    def invalid(self) -> bool:
        return self.err is ErrCode.INVALID_REQUEST

    @property
    def store_failed(self) -> bool:
        return self.err is ErrCode.STORE_ERROR

    def __repr__(self):
        if self.ok:
            return f"DPResult(ok=True, value={self.value!r})"
        return f"DPResult(ok=False, err={self.err.name}, detail={self.detail!r})"
