import importlib.metadata

from h5records.api import (
    RecordDataset,
    create_dataset,
    create_unique_dataset,
    load_dataset,
    load_unique_dataset,
    open_dataset,
    read_dataset,
    read_unique_dataset,
    store_dataset,
    store_unique_dataset,
    write_dataset,
    write_unique_dataset,
)
from h5records.buffers import RecordBuffer
from h5records.errors import (
    CreationFailure,
    DTypeMismatch,
    ExtendFailure,
    GroupCreationFailure,
    IndexOutOfBounds,
    NotFound,
    ReadFailure,
    RecordError,
    ShapeMismatch,
    TransferFailure,
    WriteFailure,
)
from h5records.groups import exists, exists_dataset, exists_group, open_or_create_path
from h5records.shapes import (
    FixedArray,
    MultiArray,
    Scalar,
    Vector,
    VectorOfFixedArray,
    classify,
)

__version__ = importlib.metadata.version(__package__)

__all__ = [
    "CreationFailure",
    "DTypeMismatch",
    "ExtendFailure",
    "FixedArray",
    "GroupCreationFailure",
    "IndexOutOfBounds",
    "MultiArray",
    "NotFound",
    "ReadFailure",
    "RecordBuffer",
    "RecordDataset",
    "RecordError",
    "Scalar",
    "ShapeMismatch",
    "TransferFailure",
    "Vector",
    "VectorOfFixedArray",
    "WriteFailure",
    "classify",
    "create_dataset",
    "create_unique_dataset",
    "exists",
    "exists_dataset",
    "exists_group",
    "load_dataset",
    "load_unique_dataset",
    "open_dataset",
    "open_or_create_path",
    "read_dataset",
    "read_unique_dataset",
    "store_dataset",
    "store_unique_dataset",
    "write_dataset",
    "write_unique_dataset",
]
