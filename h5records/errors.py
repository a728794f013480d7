"""
Exceptions raised by h5records

Every failure carries the name of the dataset involved (when known) so that
callers can tell a missing dataset from a changed shape or an I/O error.
"""

from __future__ import annotations

from typing import Any


class RecordError(Exception):
    """Base class for all h5records errors."""

    def __init__(self, message: str, *, name: str | None = None):
        super().__init__(message)
        self.name = name


class CreationFailure(RecordError):
    """A dataset could not be allocated."""


class GroupCreationFailure(CreationFailure):
    """A group on the path to a dataset could not be opened or created."""


class ShapeMismatch(RecordError, ValueError):
    """In-memory and on-disk shapes disagree and cannot be reconciled."""

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message, name=name)
        self.expected = expected
        self.actual = actual


class DTypeMismatch(RecordError, TypeError):
    """The element type of a value does not match the dataset."""

    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message, name=name)
        self.expected = expected
        self.actual = actual


class ExtendFailure(RecordError):
    """A dataset is not growable or has reached its maximum length."""


class IndexOutOfBounds(RecordError, IndexError):
    def __init__(
        self,
        message: str,
        *,
        name: str | None = None,
        index: int | None = None,
        length: int | None = None,
    ):
        super().__init__(message, name=name)
        self.index = index
        self.length = length


class TransferFailure(RecordError):
    """The underlying storage reported an error after validation passed."""


class ReadFailure(TransferFailure):
    pass


class WriteFailure(TransferFailure):
    pass


class NotFound(RecordError, KeyError):
    """A dataset was read by name but does not exist."""

    # KeyError.__str__ would repr() the message
    __str__ = Exception.__str__
