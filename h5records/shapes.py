"""
Record categories

A category describes how one in-memory value maps onto one record of a
dataset: its element type, its rank, and how the shape of the record is
derived. The set of categories is closed:

==========================  ====  ===============================
Category                    rank  record shape
==========================  ====  ===============================
Scalar(dtype)               0     ()
FixedArray(dtype, size)     1     (size,)
MultiArray(dtype, ndim)     ndim  the array's shape, on each call
Vector(dtype)               1     (len(value),), on each call
VectorOfFixedArray(dtype,   2     (len(value), size), on each call
size)
==========================  ====  ===============================

Categories are pure descriptions and never touch a file. Constructing one for
an unsupported element type fails immediately, before any I/O is attempted.
"""

from __future__ import annotations

import abc
import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import DTypeLike

from h5records.errors import ShapeMismatch
from h5records.tools import asarray, is_fundamental_dtype
from h5records.typing_ import Destination, RecordLike


@dataclass(frozen=True)
class RecordLayout:
    """The canonical (element type, rank, shape) triple of one record."""

    dtype: np.dtype
    shape: tuple[int, ...]

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def nbytes(self) -> int:
        return self.dtype.itemsize * math.prod(self.shape)


class Category(abc.ABC):
    """Base class of the record categories."""

    rank: int
    #: Whether a read may change the shape of the destination
    resizable: bool = True

    def __init__(self, dtype: DTypeLike):
        dtype = np.dtype(dtype)
        if not is_fundamental_dtype(dtype):
            raise TypeError(
                f"{type(self).__name__} records must have a bool, integer, float "
                f"or complex element type, not {dtype}"
            )
        self.dtype = dtype

    def _params(self) -> tuple:
        return ()

    def __repr__(self) -> str:
        args = ", ".join([repr(self.dtype.str), *map(repr, self._params())])
        return f"{type(self).__name__}({args})"

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        assert isinstance(other, Category)
        return self.dtype == other.dtype and self._params() == other._params()

    def __hash__(self) -> int:
        return hash((type(self), self.dtype, self._params()))

    @abc.abstractmethod
    def record_shape(self, shape: Any = None) -> tuple[int, ...]:
        """Record shape from the arguments given when creating a dataset."""

    @abc.abstractmethod
    def accepts(self, shape: tuple[int, ...]) -> bool:
        """Whether a record of this shape can hold a value of this category."""

    def creation_layout(self, shape: Any = None) -> RecordLayout:
        return RecordLayout(self.dtype, self.record_shape(shape))

    def _normalize(self, buf: np.ndarray) -> np.ndarray:
        return buf

    def as_buffer(self, data: RecordLike, *, name: str | None = None) -> np.ndarray:
        """Return data as a contiguous array holding exactly one record.

        The shape of the result is the record shape of data, derived anew on
        every call.
        """
        try:
            buf = asarray(data, dtype=self.dtype, name=name)
        except ValueError as e:
            # numpy refuses ragged nested sequences
            raise ShapeMismatch(
                f"{self!r} cannot hold a ragged value", name=name
            ) from e
        buf = self._normalize(buf)
        if not self.accepts(buf.shape):
            raise ShapeMismatch(
                f"{self!r} cannot hold a value of shape {buf.shape}",
                name=name,
                expected=self.rank,
                actual=buf.shape,
            )
        return buf

    def layout(self, data: RecordLike, *, name: str | None = None) -> RecordLayout:
        return RecordLayout(self.dtype, self.as_buffer(data, name=name).shape)

    def current_shape(self, destination: Destination) -> tuple[int, ...]:
        if isinstance(destination, list):
            raise TypeError(f"{self!r} cannot read into a list")
        return tuple(destination.shape)

    def resize(
        self,
        destination: Destination,
        shape: tuple[int, ...],
        *,
        name: str | None = None,
    ) -> Destination:
        """Give destination the record shape `shape`, in place.

        This may allocate new backing storage for the destination. The
        destination object itself is returned.
        """
        current = self.current_shape(destination)
        if current == shape:
            return destination
        if not self.resizable or len(current) != len(shape):
            raise ShapeMismatch(
                f"cannot read a record of shape {shape} into a {self!r} "
                f"destination of shape {current}",
                name=name,
                expected=shape,
                actual=current,
            )
        if isinstance(destination, list):
            self._resize_list(destination, shape)
        elif hasattr(destination, "resize") and not isinstance(
            destination, np.ndarray
        ):
            destination.resize(shape)
        else:
            # ndarray.resize() refuses arrays that are referenced elsewhere,
            # which is always the case by the time they get here
            raise ShapeMismatch(
                f"cannot resize a {type(destination).__name__} destination from "
                f"{current} to {shape}; use a RecordBuffer or a list",
                name=name,
                expected=shape,
                actual=current,
            )
        return destination

    def _resize_list(self, destination: list, shape: tuple[int, ...]) -> None:
        raise TypeError(f"{self!r} cannot read into a list")

    def assign(self, destination: Destination, values: np.ndarray) -> None:
        """Copy the values of one record into destination."""
        destination[...] = values


class Scalar(Category):
    rank = 0
    resizable = False

    def record_shape(self, shape: Any = None) -> tuple[int, ...]:
        if shape not in (None, ()):
            raise ShapeMismatch(
                f"{self!r} records have no shape, got {shape!r}",
                expected=(),
                actual=shape,
            )
        return ()

    def accepts(self, shape: tuple[int, ...]) -> bool:
        return shape == ()

    def assign(self, destination: Destination, values: np.ndarray) -> None:
        destination[()] = values


class FixedArray(Category):
    rank = 1
    resizable = False

    def __init__(self, dtype: DTypeLike, size: int):
        super().__init__(dtype)
        self.size = _check_extent(size, "size")

    def _params(self) -> tuple:
        return (self.size,)

    def record_shape(self, shape: Any = None) -> tuple[int, ...]:
        if shape is not None and _as_shape(shape) != (self.size,):
            raise ShapeMismatch(
                f"{self!r} records have shape {(self.size,)}, got {shape!r}",
                expected=(self.size,),
                actual=shape,
            )
        return (self.size,)

    def accepts(self, shape: tuple[int, ...]) -> bool:
        return shape == (self.size,)


class MultiArray(Category):
    rank: int

    def __init__(self, dtype: DTypeLike, ndim: int):
        super().__init__(dtype)
        self.rank = _check_extent(ndim, "ndim")

    @property
    def ndim(self) -> int:
        return self.rank

    def _params(self) -> tuple:
        return (self.rank,)

    def record_shape(self, shape: Any = None) -> tuple[int, ...]:
        if shape is None:
            raise TypeError(f"{self!r} datasets need a shape")
        shape = _as_shape(shape)
        if len(shape) != self.rank:
            raise ShapeMismatch(
                f"{self!r} records have {self.rank} dimensions, got shape {shape}",
                expected=self.rank,
                actual=shape,
            )
        return shape

    def accepts(self, shape: tuple[int, ...]) -> bool:
        return len(shape) == self.rank


class Vector(Category):
    rank = 1

    def record_shape(self, shape: Any = None) -> tuple[int, ...]:
        if shape is None:
            raise TypeError(f"{self!r} datasets need a length")
        shape = _as_shape(shape)
        if len(shape) != 1:
            raise ShapeMismatch(
                f"{self!r} records have one dimension, got shape {shape}",
                expected=1,
                actual=shape,
            )
        return shape

    def accepts(self, shape: tuple[int, ...]) -> bool:
        return len(shape) == 1

    def current_shape(self, destination: Destination) -> tuple[int, ...]:
        if isinstance(destination, list):
            return (len(destination),)
        return tuple(destination.shape)

    def _resize_list(self, destination: list, shape: tuple[int, ...]) -> None:
        (n,) = shape
        zero = self.dtype.type(0)
        destination[n:] = []
        destination.extend(zero for _ in range(n - len(destination)))

    def assign(self, destination: Destination, values: np.ndarray) -> None:
        if isinstance(destination, list):
            destination[:] = values.tolist()
        else:
            destination[...] = values


class VectorOfFixedArray(Category):
    """A variable number of fixed-size rows, stored row-major."""

    rank = 2

    def __init__(self, dtype: DTypeLike, size: int):
        super().__init__(dtype)
        self.size = _check_extent(size, "size")

    def _params(self) -> tuple:
        return (self.size,)

    def record_shape(self, shape: Any = None) -> tuple[int, ...]:
        if shape is None:
            raise TypeError(f"{self!r} datasets need a length")
        shape = _as_shape(shape)
        if len(shape) == 1:
            shape = (shape[0], self.size)
        if not self.accepts(shape):
            raise ShapeMismatch(
                f"{self!r} records have shape (n, {self.size}), got {shape}",
                expected=(None, self.size),
                actual=shape,
            )
        return shape

    def accepts(self, shape: tuple[int, ...]) -> bool:
        return len(shape) == 2 and shape[1] == self.size

    def _normalize(self, buf: np.ndarray) -> np.ndarray:
        # An empty list has no rows to take the width from
        if buf.ndim == 1 and buf.size == 0:
            return buf.reshape(0, self.size)
        return buf

    def current_shape(self, destination: Destination) -> tuple[int, ...]:
        if isinstance(destination, list):
            return (len(destination), self.size)
        return tuple(destination.shape)

    def _resize_list(self, destination: list, shape: tuple[int, ...]) -> None:
        n = shape[0]
        destination[n:] = []
        destination.extend(
            np.zeros(self.size, dtype=self.dtype) for _ in range(n - len(destination))
        )

    def assign(self, destination: Destination, values: np.ndarray) -> None:
        if isinstance(destination, list):
            destination[:] = [row.copy() for row in values]
        else:
            destination[...] = values


def classify(value: Any) -> Category:
    """Infer the category of a prototype value.

    >>> classify(1.5)
    Scalar('<f8')
    >>> classify([[1, 2, 3], [4, 5, 6]])
    VectorOfFixedArray('<i8', 3)
    >>> classify(np.zeros((2, 3, 4), dtype="f4"))
    MultiArray('<f4', 3)

    1-d arrays and flat lists are Vectors; use FixedArray explicitly for
    records whose length must never change. Other ndarrays (including 2-d ones)
    are MultiArrays.
    """
    if isinstance(value, np.ndarray):
        if value.ndim == 0:
            return Scalar(value.dtype)
        if value.ndim == 1:
            return Vector(value.dtype)
        return MultiArray(value.dtype, value.ndim)

    if isinstance(value, (list, tuple)):
        if any(isinstance(v, (list, tuple, np.ndarray)) for v in value):
            rows = [np.asarray(v) for v in value]
            if any(row.ndim != 1 for row in rows):
                raise TypeError("Sequences of sequences of sequences are not supported")
            sizes = {len(row) for row in rows}
            if len(sizes) != 1:
                raise TypeError(
                    f"Rows of different lengths {sorted(sizes)} are not supported"
                )
            (size,) = sizes
            return VectorOfFixedArray(np.result_type(*rows), size)
        return Vector(np.asarray(value).dtype)

    arr = np.asarray(value)
    if arr.ndim != 0:
        raise TypeError(f"Don't know how to classify {type(value).__name__}")
    return Scalar(arr.dtype)


def _check_extent(n: Any, what: str) -> int:
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)):
        raise TypeError(f"{what} must be an integer, got {n!r}")
    if n < 1:
        raise ValueError(f"{what} must be positive, got {n}")
    return int(n)


def _as_shape(shape: Any) -> tuple[int, ...]:
    if isinstance(shape, (int, np.integer)):
        shape = (shape,)
    shape = tuple(int(i) for i in shape)
    if any(i < 0 for i in shape):
        raise ValueError(f"Negative extent in shape {shape}")
    return shape
