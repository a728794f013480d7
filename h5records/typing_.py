"""Type annotations.

Note: This module cannot be called 'typing' or 'types' as it would shadow the
standard library modules of the same name.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol, Union, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike, DTypeLike, NDArray


@runtime_checkable
class ArrayProtocol(Protocol):
    """Minimal read-only NumPy array-like interface.

    Anything implementing this (numpy arrays, h5py datasets) can be written as
    a record without first being coerced to a list.
    """

    @property
    def shape(self) -> tuple[int, ...]: ...

    @property
    def ndim(self) -> int: ...

    @property
    def dtype(self) -> np.dtype: ...

    def __getitem__(self, index: Any) -> ArrayProtocol: ...

    def __array__(
        self, dtype: DTypeLike | None = None, copy: bool | None = None
    ) -> NDArray: ...


@runtime_checkable  # Does not support inheritance
class MutableArrayProtocol(Protocol):
    """A read destination: an array-like that supports item assignment."""

    @property
    def shape(self) -> tuple[int, ...]: ...

    @property
    def ndim(self) -> int: ...

    @property
    def dtype(self) -> np.dtype: ...

    def __getitem__(self, index: Any) -> MutableArrayProtocol: ...

    def __array__(
        self, dtype: DTypeLike | None = None, copy: bool | None = None
    ) -> NDArray: ...

    def __setitem__(self, index: Any, value: ArrayLike) -> None: ...


# Values accepted by the writers, and destinations accepted by the readers
RecordLike = Union[ArrayLike, ArrayProtocol]
Destination = Union[MutableArrayProtocol, list]


class Default(Enum):
    """Sentinel for default argument values."""

    DEFAULT = "default"


DEFAULT = Default.DEFAULT
