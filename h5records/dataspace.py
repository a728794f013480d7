"""
Reconciling in-memory records with on-disk dataspaces

A sequence dataset stores its records along a leading axis, so its on-disk
shape is ``(length, *record_shape)``; a unique dataset stores a single record
and its on-disk shape is ``record_shape``. The functions in this module check
values, datasets and read destinations against that layout. None of them
modify the file.
"""

from __future__ import annotations

import logging

from h5py import Dataset
from ndindex import Integer, Slice, Tuple

from h5records.errors import DTypeMismatch, ShapeMismatch
from h5records.shapes import Category, RecordLayout
from h5records.typing_ import Destination

logger = logging.getLogger(__name__)


def disk_rank(category: Category, *, unique: bool) -> int:
    """The rank of a dataset holding records of this category."""
    return category.rank if unique else category.rank + 1


def check_rank(dataset: Dataset, rank: int) -> None:
    if dataset.ndim != rank:
        raise ShapeMismatch(
            f"dataset {dataset.name!r} has incompatible dataspace: "
            f"rank {dataset.ndim}, expected {rank}",
            name=dataset.name,
            expected=rank,
            actual=dataset.ndim,
        )


def record_shape_of(dataset: Dataset, *, unique: bool) -> tuple[int, ...]:
    """The committed shape of one record of dataset."""
    return tuple(dataset.shape) if unique else tuple(dataset.shape[1:])


def check_compatible(dataset: Dataset, layout: RecordLayout, *, unique: bool) -> None:
    """Raise unless a record of this layout fits the dataset.

    The non-leading extents of a dataset are fixed when it is created, so a
    record must match them exactly, including before the first record of a
    sequence dataset has been written.
    """
    check_rank(dataset, layout.rank if unique else layout.rank + 1)
    committed = record_shape_of(dataset, unique=unique)
    if committed != layout.shape:
        raise ShapeMismatch(
            f"dataset {dataset.name!r} has incompatible dataspace: "
            f"records of shape {committed}, got {layout.shape}",
            name=dataset.name,
            expected=committed,
            actual=layout.shape,
        )
    if dataset.dtype != layout.dtype:
        raise DTypeMismatch(
            f"dataset {dataset.name!r} stores {dataset.dtype}, not {layout.dtype}",
            name=dataset.name,
            expected=dataset.dtype,
            actual=layout.dtype,
        )


def check_category(dataset: Dataset, category: Category, *, unique: bool) -> None:
    """Raise unless dataset can hold records of category.

    Checks the rank, the static extents (e.g. the width of a FixedArray) and
    the element type.
    """
    check_rank(dataset, disk_rank(category, unique=unique))
    committed = record_shape_of(dataset, unique=unique)
    if not category.accepts(committed):
        raise ShapeMismatch(
            f"dataset {dataset.name!r} has records of shape {committed}, "
            f"which cannot hold {category!r} values",
            name=dataset.name,
            expected=category,
            actual=committed,
        )
    if dataset.dtype != category.dtype:
        raise DTypeMismatch(
            f"dataset {dataset.name!r} stores {dataset.dtype}, "
            f"not {category.dtype}",
            name=dataset.name,
            expected=category.dtype,
            actual=dataset.dtype,
        )


def resize_target(
    dataset: Dataset, category: Category, *, unique: bool
) -> tuple[int, ...]:
    """The shape a read destination must have to receive one record."""
    check_category(dataset, category, unique=unique)
    return record_shape_of(dataset, unique=unique)


def reconcile_destination(
    category: Category,
    destination: Destination,
    target: tuple[int, ...],
    *,
    name: str | None = None,
) -> Destination:
    """Resize destination to target if their shapes disagree."""
    current = category.current_shape(destination)
    if current != target:
        logger.debug("%s: resizing destination from %s to %s", name, current, target)
    return category.resize(destination, target, name=name)


def hyperslab(index: int | None, record_shape: tuple[int, ...]) -> Tuple:
    """Selection of a single record.

    For a sequence dataset this is the record at `index` along the leading
    axis, spanning all of the non-leading extents. For a unique dataset
    (index=None) it is the whole dataset.
    """
    slices = [Slice(0, n) for n in record_shape]
    if index is None:
        return Tuple(*slices)
    return Tuple(Integer(index), *slices)
