"""
Writing and reading single records

Sequence datasets hold their records along the leading axis. A record is
either appended, which grows the leading axis by one, or written over an
existing position. Unique datasets hold exactly one record which is always
transferred as a whole.

All validation (element type, shape, index) happens before anything in the
file is modified.
"""

from __future__ import annotations

import logging

import numpy as np
from h5py import Dataset

from h5records.dataspace import (
    check_compatible,
    hyperslab,
    reconcile_destination,
    resize_target,
)
from h5records.errors import (
    ExtendFailure,
    IndexOutOfBounds,
    ReadFailure,
    WriteFailure,
)
from h5records.shapes import Category, RecordLayout
from h5records.tools import format_ndindex
from h5records.typing_ import Destination, RecordLike

logger = logging.getLogger(__name__)

# Errors h5py raises when the library fails to move data
_TRANSFER_ERRORS = (OSError, RuntimeError)


def resolve_index(index: int, length: int, name: str | None = None) -> int:
    """Resolve a possibly negative record index against the number of records.

    Negative indexes count from the end, as for Python sequences.
    """
    resolved = index + length if index < 0 else index
    if not 0 <= resolved < length:
        raise IndexOutOfBounds(
            f"index {index} is out of bounds for dataset {name!r} "
            f"with {length} records",
            name=name,
            index=index,
            length=length,
        )
    return resolved


def _transfer_in(dataset: Dataset, index: int | None, buf: np.ndarray) -> None:
    slab = hyperslab(index, buf.shape)
    logger.debug("%s: writing [%s]", dataset.name, format_ndindex(slab.raw))
    try:
        dataset[slab.raw] = buf
    except _TRANSFER_ERRORS as e:
        raise WriteFailure(
            f"failed to write to dataset {dataset.name!r} "
            f"at [{format_ndindex(slab.raw)}]",
            name=dataset.name,
        ) from e


def _transfer_out(
    dataset: Dataset, index: int | None, record_shape: tuple[int, ...]
) -> np.ndarray:
    slab = hyperslab(index, record_shape)
    logger.debug("%s: reading [%s]", dataset.name, format_ndindex(slab.raw))
    try:
        return np.asarray(dataset[slab.raw])
    except _TRANSFER_ERRORS as e:
        raise ReadFailure(
            f"failed to read from dataset {dataset.name!r} "
            f"at [{format_ndindex(slab.raw)}]",
            name=dataset.name,
        ) from e


def write_record(
    dataset: Dataset, category: Category, data: RecordLike, index: int
) -> int:
    """Overwrite the record at index of a sequence dataset.

    The number of records does not change. Returns the resolved index.
    """
    buf = category.as_buffer(data, name=dataset.name)
    check_compatible(dataset, RecordLayout(category.dtype, buf.shape), unique=False)
    resolved = resolve_index(index, dataset.shape[0], dataset.name)
    _transfer_in(dataset, resolved, buf)
    return resolved


def append_record(dataset: Dataset, category: Category, data: RecordLike) -> int:
    """Append a record to a sequence dataset and return its index."""
    buf = category.as_buffer(data, name=dataset.name)
    check_compatible(dataset, RecordLayout(category.dtype, buf.shape), unique=False)

    length = dataset.shape[0]
    maxlen = dataset.maxshape[0] if dataset.chunks is not None else length
    if maxlen is not None and length >= maxlen:
        raise ExtendFailure(
            f"dataset {dataset.name!r} cannot be extended beyond "
            f"{length} records",
            name=dataset.name,
        )
    try:
        dataset.resize(length + 1, axis=0)
    except (ValueError, TypeError, OSError, RuntimeError) as e:
        raise ExtendFailure(
            f"dataset {dataset.name!r} cannot be extended", name=dataset.name
        ) from e
    logger.debug("%s: extended to %d records", dataset.name, length + 1)

    try:
        _transfer_in(dataset, length, buf)
    except WriteFailure:
        try:
            dataset.resize(length, axis=0)
        except (ValueError, TypeError, OSError, RuntimeError) as e:
            logger.debug(
                "%s: could not shrink back to %d records: %s", dataset.name, length, e
            )
        raise
    return length


def write_unique_record(
    dataset: Dataset, category: Category, data: RecordLike
) -> None:
    """Overwrite the single record of a unique dataset."""
    buf = category.as_buffer(data, name=dataset.name)
    check_compatible(dataset, RecordLayout(category.dtype, buf.shape), unique=True)
    _transfer_in(dataset, None, buf)


def read_record(
    dataset: Dataset, category: Category, destination: Destination, index: int
) -> int:
    """Read the record at index of a sequence dataset into destination.

    destination is resized to the record shape first if needed. Returns the
    resolved (non-negative) index.
    """
    target = resize_target(dataset, category, unique=False)
    resolved = resolve_index(index, dataset.shape[0], dataset.name)
    reconcile_destination(category, destination, target, name=dataset.name)
    values = _transfer_out(dataset, resolved, target)
    category.assign(destination, values)
    return resolved


def read_unique_record(
    dataset: Dataset, category: Category, destination: Destination
) -> Destination:
    """Read the single record of a unique dataset into destination."""
    target = resize_target(dataset, category, unique=True)
    reconcile_destination(category, destination, target, name=dataset.name)
    values = _transfer_out(dataset, None, target)
    category.assign(destination, values)
    return destination

