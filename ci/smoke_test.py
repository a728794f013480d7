"""Import h5py and h5records.
Print out HDF5, h5py, and h5records versions.
Finally, create an HDF5 file on disk and write some records to it.
"""

import tempfile

import h5py
import h5py.h5

try:
    # Print h5py and hdf5 versions even if h5records is broken
    import h5records  # noqa: E402

    exc = None
except Exception as e:
    exc = e


def main():
    print("libhdf5  ", ".".join(map(str, h5py.h5.get_libversion())))
    print("h5py     ", h5py.__version__)
    if exc is None:
        print("h5records", h5records.__version__)
    else:
        raise exc

    with tempfile.TemporaryFile() as fh, h5py.File(fh, "w") as f:
        for i in range(3):
            h5records.store_dataset(f, "steps/data", h5records.Vector("i8"), [i] * 4)
        dest = []
        h5records.load_dataset(f, "steps/data", h5records.Vector("i8"), dest, 1)
        assert dest == [1, 1, 1, 1]
    print("Smoke test successful!")


if __name__ == "__main__":
    main()
