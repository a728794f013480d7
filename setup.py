import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()


setuptools.setup(
    name="h5records",
    version="0.1.0",
    author="h5records developers",
    description="Sequences of typed records in HDF5 datasets",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=['h5records', 'h5records.tests'],
    license="BSD",
    install_requires=[
        "h5py>=3",
        "numpy",
        "ndindex>=1.3",
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.9',
)
