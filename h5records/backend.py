from __future__ import annotations

import logging
import os
import posixpath as pp
from dataclasses import dataclass
from typing import Any

from h5py import Dataset, Group

from h5records.errors import CreationFailure
from h5records.groups import delete_entry, open_or_create_path, split_path
from h5records.shapes import Category, RecordLayout
from h5records.typing_ import DEFAULT, Default

logger = logging.getLogger(__name__)

COMPRESSION = "gzip"
DEFAULT_COMPRESSION_LEVEL = 6
# Chunks of at most this many bytes are stored uncompressed
MIN_COMPRESSED_CHUNK_BYTES = 64
COMPRESSION_LEVEL_ENV = "H5RECORDS_COMPRESSION_LEVEL"


def _check_level(level: Any) -> int:
    if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level <= 9:
        raise ValueError(
            f"compression level must be an integer from 0 to 9, got {level!r}"
        )
    return level


def default_compression_level() -> int | None:
    """The gzip level used when a dataset is created without an explicit one.

    This is DEFAULT_COMPRESSION_LEVEL unless the H5RECORDS_COMPRESSION_LEVEL
    environment variable is set, to an integer from 0 to 9 or to "none" to
    store everything uncompressed. The variable is read on every call.
    """
    value = os.environ.get(COMPRESSION_LEVEL_ENV)
    if value is None:
        return DEFAULT_COMPRESSION_LEVEL
    if value.strip().lower() in ("", "none", "off"):
        return None
    try:
        return _check_level(int(value))
    except ValueError:
        raise ValueError(
            f"{COMPRESSION_LEVEL_ENV} must be an integer from 0 to 9 or 'none', "
            f"got {value!r}"
        ) from None


def resolve_compression_level(level: int | None | Default = DEFAULT) -> int | None:
    if level is DEFAULT:
        return default_compression_level()
    if level is None:
        return None
    return _check_level(level)


@dataclass
class StorageLayout:
    """Dataspace, chunking and compression of a record dataset.

    These are the keyword arguments given to h5py.Group.create_dataset().
    """

    shape: tuple[int, ...]
    maxshape: tuple[int | None, ...]
    chunks: tuple[int, ...] | None = None
    compression: str | None = None
    compression_opts: int | None = None

    def as_kwargs(self) -> dict[str, Any]:
        """Convert to kwargs for create_dataset."""
        kwargs: dict[str, Any] = {"shape": self.shape}
        # h5py picks a chunk shape by itself whenever maxshape is given
        if self.maxshape != self.shape:
            kwargs["maxshape"] = self.maxshape
        if self.chunks is not None:
            kwargs["chunks"] = self.chunks
        if self.compression is not None:
            kwargs["compression"] = self.compression
            kwargs["compression_opts"] = self.compression_opts
        return kwargs

    @staticmethod
    def from_dataset(ds: Dataset) -> StorageLayout:
        """Reverse engineer create_dataset kwargs from an h5py.Dataset."""
        return StorageLayout(
            shape=tuple(ds.shape),
            maxshape=tuple(ds.maxshape),
            chunks=ds.chunks,
            compression=ds.compression,
            compression_opts=ds.compression_opts,
        )

    @classmethod
    def for_sequence(
        cls,
        layout: RecordLayout,
        *,
        max_length: int | None = None,
        compression_level: int | None | Default = DEFAULT,
    ) -> StorageLayout:
        """Layout of an empty dataset growable to max_length records.

        Every record is one chunk. max_length=None means unlimited.
        """
        level = resolve_compression_level(compression_level)
        compress = level is not None and layout.nbytes > MIN_COMPRESSED_CHUNK_BYTES
        return cls(
            shape=(0, *layout.shape),
            maxshape=(max_length, *layout.shape),
            chunks=(1, *layout.shape),
            compression=COMPRESSION if compress else None,
            compression_opts=level if compress else None,
        )

    @classmethod
    def for_unique(
        cls,
        layout: RecordLayout,
        *,
        compression_level: int | None | Default = DEFAULT,
    ) -> StorageLayout:
        """Layout of a dataset holding exactly one record.

        The record is stored as a single compressed chunk if it is large
        enough, and contiguously otherwise.
        """
        level = resolve_compression_level(compression_level)
        compress = (
            level is not None
            and layout.rank > 0
            and all(n > 0 for n in layout.shape)
            and layout.nbytes > MIN_COMPRESSED_CHUNK_BYTES
        )
        return cls(
            shape=layout.shape,
            maxshape=layout.shape,
            chunks=layout.shape if compress else None,
            compression=COMPRESSION if compress else None,
            compression_opts=level if compress else None,
        )


def create_record_dataset(
    location: Group,
    name: str,
    category: Category,
    shape: Any = None,
    *,
    unique: bool = False,
    max_length: int | None = None,
    compression_level: int | None | Default = DEFAULT,
) -> Dataset:
    """Create the dataset `name` holding records of `category`.

    `shape` gives the record shape where the category needs one: a length for
    Vector and VectorOfFixedArray, a shape tuple for MultiArray.

    Any existing entry called `name` is deleted first. Missing intermediate
    groups are created.
    """
    full_name = pp.join(location.name, name)
    layout = category.creation_layout(shape)

    if unique:
        storage = StorageLayout.for_unique(layout, compression_level=compression_level)
    else:
        if 0 in layout.shape:
            raise CreationFailure(
                f'failed to create dataset "{full_name}": sequence records of '
                f"shape {layout.shape} have no elements",
                name=full_name,
            )
        if max_length is not None and (
            isinstance(max_length, bool)
            or not isinstance(max_length, int)
            or max_length < 1
        ):
            raise CreationFailure(
                f'failed to create dataset "{full_name}": max_length must be a '
                f"positive integer or None, got {max_length!r}",
                name=full_name,
            )
        storage = StorageLayout.for_sequence(
            layout, max_length=max_length, compression_level=compression_level
        )

    try:
        parent_path, leaf = split_path(name)
    except ValueError as e:
        raise CreationFailure(
            f'failed to create dataset "{full_name}"', name=full_name
        ) from e
    parent = open_or_create_path(location, parent_path)

    delete_entry(parent, leaf)
    try:
        ds = parent.create_dataset(leaf, dtype=layout.dtype, **storage.as_kwargs())
    except (ValueError, TypeError, OSError, RuntimeError) as e:
        raise CreationFailure(
            f'failed to create dataset "{full_name}"', name=full_name
        ) from e

    logger.debug(
        "Created %s dataset %s: dtype=%s %s",
        "unique" if unique else "sequence",
        ds.name,
        ds.dtype,
        StorageLayout.from_dataset(ds),
    )
    return ds
