from __future__ import annotations

import math
from typing import Any

import numpy as np
from numpy.typing import DTypeLike

from h5records.errors import DTypeMismatch
from h5records.typing_ import ArrayProtocol, RecordLike

FUNDAMENTAL_KINDS = frozenset("biufc")


def is_fundamental_dtype(dtype: np.dtype) -> bool:
    """Return True if the dtype is a plain bool, integer, float or complex type;
    False for strings, objects, datetimes, structured and subarray dtypes.
    """
    return dtype.kind in FUNDAMENTAL_KINDS and dtype.fields is None and not dtype.shape


def asarray(
    a: RecordLike, /, *, dtype: DTypeLike, name: str | None = None
) -> np.ndarray:
    """Variant of np.ascontiguousarray(a, dtype=dtype), with some differences:

    1. The result is always a C-contiguous numpy.ndarray (0-d for scalars),
       so that it can be handed to h5py as the source of a single transfer.
    2. Values whose element type cannot be converted to dtype without changing
       kind (e.g. float -> int) raise DTypeMismatch instead of being silently
       truncated.
    3. If a already has the right dtype and layout, it is returned as is.
    """
    dtype = np.dtype(dtype)
    if isinstance(a, ArrayProtocol) and not np.isscalar(a):
        src_dtype = np.dtype(a.dtype)
        size = math.prod(a.shape)
    else:
        a = np.asarray(a)
        src_dtype = a.dtype
        size = a.size

    # np.asarray([]) is float64; empty values have nothing to truncate
    if (
        size
        and src_dtype != dtype
        and not np.can_cast(src_dtype, dtype, casting="same_kind")
    ):
        raise DTypeMismatch(
            f"cannot store {src_dtype} values in a dataset of {dtype}",
            name=name,
            expected=dtype,
            actual=src_dtype,
        )

    if isinstance(a, np.ndarray) and a.dtype == dtype and a.flags.c_contiguous:
        return a
    return np.ascontiguousarray(np.asarray(a), dtype=dtype)


def format_ndindex(idx: Any) -> str:
    """Format a numpy ndindex for pretty-printing.

    >>> format_ndindex(slice(None))
    ':'
    >>> format_ndindex(slice(None, 10, 2))
    ':10:2'
    >>> format_ndindex(())
    '()'
    >>> format_ndindex((1, slice(0, 3, 1)))
    '1, 0:3'
    """
    if isinstance(idx, tuple):
        if idx == ():
            return "()"
    else:
        idx = (idx,)

    idx_s = []
    for i in idx:
        if isinstance(i, slice):
            start = "" if i.start is None else i.start
            stop = "" if i.stop is None else i.stop
            step = "" if i.step in (1, None) else f":{i.step}"
            idx_s.append(f"{start}:{stop}{step}")
        elif isinstance(i, np.ndarray):
            idx_s.append(str(i.tolist()))
        else:
            idx_s.append(str(i))
    return ", ".join(idx_s)
