from __future__ import annotations

from collections.abc import Generator

import h5py
from pytest import fixture


@fixture
def filepath(tmp_path):
    yield tmp_path / "file.hdf5"


@fixture
def h5file(filepath) -> Generator[h5py.File]:
    f = h5py.File(filepath, "w")
    yield f
    f.close()


@fixture(autouse=True)
def default_compression(monkeypatch):
    """Don't let the environment of the test runner change dataset layouts."""
    monkeypatch.delenv("H5RECORDS_COMPRESSION_LEVEL", raising=False)
