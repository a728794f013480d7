"""
Groups and links in the container hierarchy

The checks in this module never raise; they return False for anything that
cannot be resolved.
"""

from __future__ import annotations

import logging
import posixpath as pp

from h5py import Dataset, Group

from h5records.errors import GroupCreationFailure

logger = logging.getLogger(__name__)


def split_path(name: str) -> tuple[str, str]:
    """Split a dataset path into its parent group path and its leaf name.

    >>> split_path("a/b/c")
    ('a/b', 'c')
    >>> split_path("c")
    ('', 'c')
    >>> split_path("/c")
    ('/', 'c')
    """
    if name.endswith("/") and name != "/":
        name = name.rstrip("/")
    parent, leaf = pp.split(name)
    if not leaf:
        raise ValueError(f"{name!r} does not name a dataset")
    return parent, leaf


def open_or_create_path(location: Group, path: str) -> Group:
    """Open the group at path, creating it and any missing intermediate groups."""
    if path in ("", "."):
        return location
    try:
        return location.require_group(path)
    except (KeyError, ValueError, TypeError, OSError, RuntimeError) as e:
        raise GroupCreationFailure(
            f"failed to create group {path!r} in {location.name!r}", name=path
        ) from e


def exists(location: Group, name: str) -> bool:
    """Return True if anything is linked at name; False otherwise."""
    try:
        return name in location
    except (KeyError, ValueError, TypeError, OSError, RuntimeError):
        return False


def _linked_class(location: Group, name: str) -> type | None:
    if not exists(location, name):
        return None
    try:
        return location.get(name, getclass=True)
    except (KeyError, ValueError, TypeError, OSError, RuntimeError):
        # dangling soft or external link
        return None


def exists_dataset(location: Group, name: str) -> bool:
    """Return True if name is a dataset; False if missing or something else."""
    return _linked_class(location, name) is Dataset


def exists_group(location: Group, name: str) -> bool:
    """Return True if name is a group; False if missing or something else."""
    return _linked_class(location, name) is Group


def delete_entry(location: Group, name: str) -> None:
    """Unlink name from location, ignoring failures.

    The entry may simply not exist, or the file may be read-only; in the latter
    case a subsequent create will report the problem.
    """
    try:
        del location[name]
    except KeyError:
        return
    except (ValueError, TypeError, OSError, RuntimeError) as e:
        logger.debug("Could not delete %r from %r: %s", name, location.name, e)
        return
    logger.debug("Deleted %r from %r", name, location.name)
