"""
Resizable in-memory record containers

numpy arrays cannot safely change shape once other code holds a reference to
them, so reads that need to reshape their destination use a RecordBuffer: an
object that looks like a numpy array but can swap its backing array for a new
one of a different shape.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, DTypeLike

try:
    from numpy.exceptions import AxisError  # numpy >=1.25
except ModuleNotFoundError:
    from numpy import AxisError  # numpy 1.24


class RecordBuffer:
    """
    Class that looks like a numpy array but can be resized in place

    Resizing keeps the object's identity but allocates a new backing array;
    elements in the overlapping region are preserved, new elements are zero.
    Views previously obtained from ``buffer.array`` or ``buffer[...]`` keep
    pointing at the old array.

    >>> buf = RecordBuffer(shape=(1, 1), dtype="f8")
    >>> buf.resize((3, 4))
    >>> buf.shape
    (3, 4)
    """

    def __init__(
        self,
        array: ArrayLike | None = None,
        *,
        shape: int | tuple[int, ...] | None = None,
        dtype: DTypeLike | None = None,
    ):
        if array is None:
            if shape is None:
                raise TypeError("Either array or shape must be specified")
            array = np.zeros(shape, dtype=np.float64 if dtype is None else dtype)
        else:
            array = np.array(array, dtype=dtype, order="C")
            if shape is not None and array.shape != _normalize_shape(shape):
                raise ValueError(
                    f"Shape {shape} is incompatible with data of shape {array.shape}"
                )
        self._buffer = array

    @property
    def array(self) -> np.ndarray:
        """The current backing array."""
        return self._buffer

    @property
    def shape(self) -> tuple[int, ...]:
        return self._buffer.shape

    @property
    def dtype(self) -> np.dtype:
        return self._buffer.dtype

    @property
    def ndim(self) -> int:
        return self._buffer.ndim

    @property
    def size(self) -> int:
        return math.prod(self.shape)

    def __len__(self) -> int:
        if self.ndim == 0:
            raise TypeError("len() of unsized RecordBuffer")
        return self.shape[0]

    def __iter__(self) -> Iterable[np.ndarray | np.generic]:
        if self.ndim == 0:
            raise TypeError("Can't iterate over a 0-d RecordBuffer")
        return iter(self._buffer)

    def __array__(
        self,
        dtype: DTypeLike | None = None,
        copy: bool | None = None,
    ) -> np.ndarray:
        if copy:
            return np.array(self._buffer, dtype=dtype)
        return np.asarray(self._buffer, dtype=dtype)

    def __getitem__(self, index: Any) -> np.ndarray | np.generic:
        return self._buffer[index]

    def __setitem__(self, index: Any, value: ArrayLike) -> None:
        self._buffer[index] = value

    def __repr__(self) -> str:
        return '<{}: shape {}, type "{}">'.format(
            self.__class__.__name__, self.shape, self.dtype.str
        )

    def resize(self, size: int | tuple[int, ...], axis: int | None = None) -> None:
        """Change the shape of the buffer, like h5py.Dataset.resize()"""
        new_shape = _normalize_resize_args(self.shape, size, axis)
        if new_shape == self.shape:
            return
        new = np.zeros(new_shape, dtype=self.dtype)
        overlap = tuple(slice(min(n, o)) for n, o in zip(new_shape, self.shape))
        new[overlap] = self._buffer[overlap]
        self._buffer = new


def _normalize_shape(shape: int | tuple[int, ...]) -> tuple[int, ...]:
    return (shape,) if isinstance(shape, (int, np.integer)) else tuple(shape)


def _normalize_resize_args(
    shape: tuple[int, ...],
    size: int | list[int] | tuple[int, ...] | np.ndarray,
    axis: int | None,
) -> tuple[int, ...]:
    """Normalize the parameters of RecordBuffer.resize()"""
    ndim = len(shape)
    if axis is not None:
        if axis >= ndim or axis < -ndim:
            msg = f"axis {axis} is out of bounds for buffer of dimension {ndim}"
            raise AxisError(msg)
        try:
            size = int(size)  # type: ignore[arg-type]
        except TypeError:
            msg = f"size must be an integer when axis is specified, got {size!r}"
            raise TypeError(msg) from None

        new_shape = list(shape)
        new_shape[axis] = size
    else:
        if (
            isinstance(size, (list, tuple))
            or isinstance(size, np.ndarray)
            and size.ndim == 1
        ):
            new_shape = [int(i) for i in size]
        else:
            new_shape = [int(size)]
        if len(new_shape) != ndim:
            msg = f"Invalid shape {size} for buffer of dimension {ndim}"
            raise ValueError(msg)
    if any(i < 0 for i in new_shape):
        raise ValueError(f"Negative extent in shape {tuple(new_shape)}")

    return tuple(new_shape)
