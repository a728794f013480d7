"""
Public API functions

Everything outside of this file, h5records.shapes, h5records.buffers and
h5records.errors is considered internal API and is subject to change.
"""

from __future__ import annotations

import logging
import posixpath as pp
from typing import Any

from h5py import Dataset, Group

from h5records.backend import create_record_dataset
from h5records.dataspace import (
    check_category,
    check_compatible,
    disk_rank,
    record_shape_of,
)
from h5records.errors import (
    DTypeMismatch,
    ExtendFailure,
    NotFound,
    ShapeMismatch,
)
from h5records.groups import exists_dataset
from h5records.records import (
    append_record,
    read_record,
    read_unique_record,
    resolve_index,
    write_record,
    write_unique_record,
)
from h5records.shapes import Category, RecordLayout
from h5records.typing_ import DEFAULT, Default, Destination, RecordLike

logger = logging.getLogger(__name__)


class RecordDataset:
    """
    A dataset of records

    Wraps an h5py.Dataset together with the category of the records it holds
    and its mode: a sequence dataset holds any number of records along its
    leading axis, a unique dataset holds exactly one.

    >>> import h5py
    >>> from h5records import Vector, create_dataset
    >>> f = h5py.File('file.h5', 'w') # doctest: +SKIP
    >>> pos = create_dataset(f, 'particle/pos', Vector('f8'), 3) # doctest: +SKIP
    >>> pos.append([0.0, 1.0, 2.0]) # doctest: +SKIP
    0

    A unique dataset behaves as a dataset of length 1 that cannot grow.
    """

    def __init__(
        self, dataset: Dataset, category: Category, *, unique: bool | None = None
    ):
        if unique is None:
            if dataset.ndim == disk_rank(category, unique=True):
                unique = True
            elif dataset.ndim == disk_rank(category, unique=False):
                unique = False
            else:
                raise ShapeMismatch(
                    f"dataset {dataset.name!r} of rank {dataset.ndim} cannot hold "
                    f"{category!r} records",
                    name=dataset.name,
                    expected=disk_rank(category, unique=False),
                    actual=dataset.ndim,
                )
        check_category(dataset, category, unique=unique)
        self.dataset = dataset
        self.category = category
        self.unique = unique

    @property
    def name(self) -> str:
        return self.dataset.name

    @property
    def dtype(self):
        return self.dataset.dtype

    @property
    def record_shape(self) -> tuple[int, ...]:
        return record_shape_of(self.dataset, unique=self.unique)

    @property
    def maxlen(self) -> int | None:
        """The maximum number of records, None if unlimited."""
        if self.unique:
            return 1
        return self.dataset.maxshape[0]

    def __len__(self) -> int:
        if self.unique:
            return 1
        return self.dataset.shape[0]

    def __repr__(self) -> str:
        name = pp.basename(pp.normpath(self.name))
        return '<{} "{}": {} {}, {} records of shape {}>'.format(
            self.__class__.__name__,
            name if name != "" else "/",
            "unique" if self.unique else "sequence",
            self.category,
            len(self),
            self.record_shape,
        )

    def append(self, data: RecordLike) -> int:
        """Append a record and return its index."""
        if self.unique:
            raise ExtendFailure(
                f"unique dataset {self.name!r} cannot be extended", name=self.name
            )
        return append_record(self.dataset, self.category, data)

    def write(self, data: RecordLike, index: int | None = None) -> int:
        """Write a record at index, or append it if index is None.

        Returns the index written to.
        """
        if index is None:
            return self.append(data)
        if self.unique:
            resolved = resolve_index(index, 1, self.name)
            write_unique_record(self.dataset, self.category, data)
            return resolved
        return write_record(self.dataset, self.category, data, index)

    def write_unique(self, data: RecordLike) -> None:
        write_unique_record(self.dataset, self.category, data)

    def read(self, destination: Destination, index: int = -1) -> int:
        """Read the record at index into destination and return the resolved index."""
        if self.unique:
            resolved = resolve_index(index, 1, self.name)
            read_unique_record(self.dataset, self.category, destination)
            return resolved
        return read_record(self.dataset, self.category, destination, index)

    def read_unique(self, destination: Destination) -> Destination:
        return read_unique_record(self.dataset, self.category, destination)


def create_dataset(
    location: Group,
    name: str,
    category: Category,
    shape: Any = None,
    *,
    max_length: int | None = None,
    compression_level: int | None | Default = DEFAULT,
) -> RecordDataset:
    """
    Create an empty sequence dataset

    `shape` is the record shape for categories that need one: the length of a
    Vector or VectorOfFixedArray, or the shape tuple of a MultiArray.

    The dataset can hold up to `max_length` records, or any number of records
    if `max_length` is None (the default). `compression_level` is the gzip
    level used for records larger than 64 bytes; None disables compression.

    An existing dataset of the same name is replaced.
    """
    ds = create_record_dataset(
        location,
        name,
        category,
        shape,
        unique=False,
        max_length=max_length,
        compression_level=compression_level,
    )
    return RecordDataset(ds, category, unique=False)


def create_unique_dataset(
    location: Group,
    name: str,
    category: Category,
    shape: Any = None,
    *,
    compression_level: int | None | Default = DEFAULT,
) -> RecordDataset:
    """
    Create a dataset holding a single record

    The contents are undefined until the record is written with
    write_unique_dataset(). An existing dataset of the same name is replaced.
    """
    ds = create_record_dataset(
        location,
        name,
        category,
        shape,
        unique=True,
        compression_level=compression_level,
    )
    return RecordDataset(ds, category, unique=True)


def open_dataset(
    location: Group, name: str, category: Category, *, unique: bool | None = None
) -> RecordDataset:
    """
    Open an existing dataset of records

    Whether the dataset is a sequence or a unique dataset is inferred from its
    rank unless `unique` is given.
    """
    if not exists_dataset(location, name):
        raise NotFound(
            f"attempt to read non-existent dataset {pp.join(location.name, name)!r}",
            name=pp.join(location.name, name),
        )
    return RecordDataset(location[name], category, unique=unique)


def write_dataset(
    dataset: RecordDataset, data: RecordLike, index: int | None = None
) -> int:
    """Write data at index, appending it if index is None. Returns the index."""
    return dataset.write(data, index)


def write_unique_dataset(dataset: RecordDataset, data: RecordLike) -> None:
    dataset.write_unique(data)


def read_dataset(dataset: RecordDataset, destination: Destination, index: int) -> int:
    """
    Read the record at index into destination

    Negative indexes count from the end. The shape of `destination` is adapted
    to the record if needed (see Category.resize()). Returns the resolved,
    non-negative index.
    """
    return dataset.read(destination, index)


def read_unique_dataset(
    dataset: RecordDataset, destination: Destination
) -> Destination:
    return dataset.read_unique(destination)


def store_dataset(
    location: Group,
    name: str,
    category: Category,
    data: RecordLike,
    index: int | None = None,
    *,
    max_length: int | None = None,
    compression_level: int | None | Default = DEFAULT,
) -> int:
    """
    Write a record to the sequence dataset `name`, creating it if needed

    If index is None the record is appended. A missing dataset, or one whose
    type or record shape cannot hold `data`, is (re)created with the record
    shape of `data` first; its previous contents are lost. `max_length` and
    `compression_level` only apply when the dataset is created.

    If index is given the dataset must already exist.
    """
    if index is not None:
        return open_dataset(location, name, category, unique=False).write(data, index)

    buf = category.as_buffer(data, name=name)
    handle = None
    if exists_dataset(location, name):
        try:
            handle = RecordDataset(location[name], category, unique=False)
            check_compatible(
                handle.dataset, RecordLayout(category.dtype, buf.shape), unique=False
            )
        except (ShapeMismatch, DTypeMismatch) as e:
            logger.info("Recreating dataset %r: %s", name, e)
            handle = None

    if handle is None:
        handle = create_dataset(
            location,
            name,
            category,
            buf.shape,
            max_length=max_length,
            compression_level=compression_level,
        )
    return handle.append(buf)


def store_unique_dataset(
    location: Group,
    name: str,
    category: Category,
    data: RecordLike,
    *,
    compression_level: int | None | Default = DEFAULT,
) -> RecordDataset:
    """Create the unique dataset `name` with the shape of data and write data to it."""
    buf = category.as_buffer(data, name=name)
    handle = create_unique_dataset(
        location, name, category, buf.shape, compression_level=compression_level
    )
    handle.write_unique(buf)
    return handle


def load_dataset(
    location: Group,
    name: str,
    category: Category,
    destination: Destination,
    index: int = -1,
) -> int:
    """Read the record at index of the dataset `name` into destination."""
    return open_dataset(location, name, category).read(destination, index)


def load_unique_dataset(
    location: Group, name: str, category: Category, destination: Destination
) -> Destination:
    """Read the unique dataset `name` into destination."""
    return open_dataset(location, name, category, unique=True).read_unique(destination)
