import numpy as np
from numpy.testing import assert_equal
from pytest import mark, raises

from ..buffers import RecordBuffer
from ..errors import DTypeMismatch, ShapeMismatch
from ..shapes import (
    FixedArray,
    MultiArray,
    Scalar,
    Vector,
    VectorOfFixedArray,
    classify,
)


def test_rank():
    assert Scalar("f8").rank == 0
    assert FixedArray("f8", 3).rank == 1
    assert Vector("f8").rank == 1
    assert VectorOfFixedArray("f8", 3).rank == 2
    assert MultiArray("f8", 4).rank == MultiArray("f8", 4).ndim == 4


@mark.parametrize("dtype", ["U4", "S4", object, "M8[s]", [("a", "i4"), ("b", "f8")]])
def test_unsupported_dtype(dtype):
    with raises(TypeError):
        Vector(dtype)
    with raises(TypeError):
        Scalar(dtype)


def test_bad_parameters():
    with raises(ValueError):
        FixedArray("f8", 0)
    with raises(ValueError):
        MultiArray("f8", 0)
    with raises(TypeError):
        VectorOfFixedArray("f8", 2.0)
    with raises(TypeError):
        FixedArray("f8", True)


def test_repr():
    assert repr(Scalar("<f8")) == "Scalar('<f8')"
    assert repr(FixedArray("<i4", 3)) == "FixedArray('<i4', 3)"
    assert repr(MultiArray("<f4", 2)) == "MultiArray('<f4', 2)"
    assert repr(VectorOfFixedArray("<u2", 5)) == "VectorOfFixedArray('<u2', 5)"


def test_equality():
    assert Vector("f8") == Vector(np.float64)
    assert hash(Vector("f8")) == hash(Vector(np.float64))
    assert Vector("f8") != Vector("f4")
    assert FixedArray("f8", 3) != FixedArray("f8", 4)
    assert Vector("f8") != FixedArray("f8", 1)
    assert len({Scalar("i4"), Scalar("i4"), Scalar("i8")}) == 2


def test_record_shape():
    assert Scalar("f8").record_shape() == ()
    assert FixedArray("f8", 3).record_shape() == (3,)
    assert FixedArray("f8", 3).record_shape(3) == (3,)
    assert Vector("f8").record_shape(4) == (4,)
    assert Vector("f8").record_shape((4,)) == (4,)
    assert Vector("f8").record_shape(0) == (0,)
    assert VectorOfFixedArray("f8", 3).record_shape(5) == (5, 3)
    assert VectorOfFixedArray("f8", 3).record_shape((5, 3)) == (5, 3)
    assert MultiArray("f8", 2).record_shape((2, 7)) == (2, 7)


def test_record_shape_errors():
    with raises(ShapeMismatch):
        Scalar("f8").record_shape((2,))
    with raises(ShapeMismatch):
        FixedArray("f8", 3).record_shape(4)
    with raises(ShapeMismatch):
        Vector("f8").record_shape((2, 2))
    with raises(ShapeMismatch):
        VectorOfFixedArray("f8", 3).record_shape((5, 2))
    with raises(ShapeMismatch):
        MultiArray("f8", 3).record_shape((2, 7))
    with raises(ValueError):
        Vector("f8").record_shape(-1)
    # Categories with a dynamic shape need one to create a dataset
    for category in [Vector("f8"), VectorOfFixedArray("f8", 3), MultiArray("f8", 2)]:
        with raises(TypeError):
            category.record_shape()


def test_as_buffer_scalar():
    buf = Scalar("f8").as_buffer(3)
    assert buf.shape == ()
    assert buf.dtype == np.float64
    assert buf[()] == 3.0

    with raises(ShapeMismatch):
        Scalar("f8").as_buffer([1.0])


def test_as_buffer_vector():
    buf = Vector("f8").as_buffer([1, 2, 3])
    assert buf.shape == (3,)
    assert buf.dtype == np.float64
    assert buf.flags.c_contiguous
    assert_equal(buf, [1.0, 2.0, 3.0])

    assert Vector("f8").as_buffer([]).shape == (0,)
    # Non-contiguous input
    a = np.arange(10.0)[::2]
    assert_equal(Vector("f8").as_buffer(a), [0, 2, 4, 6, 8])

    with raises(ShapeMismatch):
        Vector("f8").as_buffer(1.0)
    with raises(ShapeMismatch):
        Vector("f8").as_buffer([[1.0]])


def test_as_buffer_no_copy():
    a = np.arange(5, dtype="i4")
    assert Vector("i4").as_buffer(a) is a


def test_as_buffer_fixed_array():
    assert FixedArray("i4", 3).as_buffer([1, 2, 3]).shape == (3,)
    with raises(ShapeMismatch):
        FixedArray("i4", 3).as_buffer([1, 2])


def test_as_buffer_vector_of_fixed_array():
    category = VectorOfFixedArray("f4", 3)
    buf = category.as_buffer([[1, 2, 3], [4, 5, 6]])
    assert buf.shape == (2, 3)
    assert buf.dtype == np.float32

    assert category.as_buffer([]).shape == (0, 3)
    assert category.as_buffer(np.zeros((0, 3))).shape == (0, 3)

    with raises(ShapeMismatch):
        category.as_buffer([[1, 2], [3, 4]])
    with raises(ShapeMismatch):
        category.as_buffer([[1, 2, 3], [4, 5]])


def test_as_buffer_multi_array():
    buf = MultiArray("f4", 3).as_buffer(np.ones((2, 3, 4)))
    assert buf.shape == (2, 3, 4)
    assert buf.dtype == np.float32

    with raises(ShapeMismatch):
        MultiArray("f4", 3).as_buffer(np.ones((2, 3)))


def test_as_buffer_dtype():
    # Same kind conversions are allowed
    assert Vector("i2").as_buffer(np.arange(3, dtype="i8")).dtype == np.int16
    assert Vector("f8").as_buffer(np.arange(3, dtype="i4")).dtype == np.float64

    with raises(DTypeMismatch):
        Vector("i4").as_buffer([1.5, 2.5])
    with raises(DTypeMismatch):
        Vector("f8").as_buffer(np.zeros(2, dtype=complex))
    with raises(DTypeMismatch):
        Scalar("i8").as_buffer("abc")


def test_layout():
    layout = VectorOfFixedArray("f8", 2).layout([[1, 2], [3, 4], [5, 6]])
    assert layout.dtype == np.float64
    assert layout.shape == (3, 2)
    assert layout.rank == 2
    assert layout.nbytes == 48


def test_resize_list():
    dest = [1.0, 2.0]
    assert Vector("f8").resize(dest, (4,)) is dest
    assert dest == [1.0, 2.0, 0.0, 0.0]
    Vector("f8").resize(dest, (1,))
    assert dest == [1.0]

    rows = []
    VectorOfFixedArray("i4", 3).resize(rows, (2, 3))
    assert len(rows) == 2
    assert_equal(rows[1], [0, 0, 0])

    with raises(TypeError):
        Scalar("f8").resize([], ())
    with raises(TypeError):
        MultiArray("f8", 2).resize([], (2, 2))


def test_resize_record_buffer():
    buf = RecordBuffer([[1, 2], [3, 4]], dtype="f8")
    assert MultiArray("f8", 2).resize(buf, (3, 3)) is buf
    assert buf.shape == (3, 3)
    assert_equal(buf.array, [[1, 2, 0], [3, 4, 0], [0, 0, 0]])

    with raises(ShapeMismatch):
        MultiArray("f8", 2).resize(buf, (3, 3, 1))


def test_resize_ndarray():
    a = np.zeros(3)
    assert Vector("f8").resize(a, (3,)) is a
    with raises(ShapeMismatch, match="RecordBuffer"):
        Vector("f8").resize(a, (4,))


def test_resize_static_shape():
    # FixedArray and Scalar destinations never change shape
    with raises(ShapeMismatch):
        FixedArray("f8", 3).resize(RecordBuffer(shape=2), (3,))
    with raises(ShapeMismatch):
        Scalar("f8").resize(RecordBuffer(shape=(1,)), ())
    a = np.zeros(3)
    assert FixedArray("f8", 3).resize(a, (3,)) is a


def test_assign():
    dest = [0.0]
    Vector("f8").assign(dest, np.array([1.0, 2.0]))
    assert dest == [1.0, 2.0]
    assert type(dest[0]) is float

    a = np.zeros(2)
    Vector("f8").assign(a, np.array([1.0, 2.0]))
    assert_equal(a, [1.0, 2.0])

    s = np.zeros(())
    Scalar("f8").assign(s, np.float64(4.0))
    assert s[()] == 4.0

    rows = [np.zeros(2), np.zeros(2)]
    values = np.array([[1, 2], [3, 4]], dtype="f8")
    VectorOfFixedArray("f8", 2).assign(rows, values)
    values[0, 0] = 100
    assert_equal(rows, [[1, 2], [3, 4]])


@mark.parametrize(
    "value,expected",
    [
        (1.5, Scalar("f8")),
        (np.float32(1), Scalar("f4")),
        (np.array(3, dtype="u1"), Scalar("u1")),
        ([1.0, 2.0], Vector("f8")),
        ((1.0, 2.0), Vector("f8")),
        ([], Vector("f8")),
        (np.arange(4, dtype="i2"), Vector("i2")),
        ([[1.0, 2.0], [3.0, 4.0], [5.0, 6.0]], VectorOfFixedArray("f8", 2)),
        ([np.zeros(4, dtype="f4")], VectorOfFixedArray("f4", 4)),
        (np.zeros((2, 3)), MultiArray("f8", 2)),
        (np.zeros((2, 3, 4), dtype="c16"), MultiArray("c16", 3)),
    ],
)
def test_classify(value, expected):
    assert classify(value) == expected


@mark.parametrize(
    "value",
    [
        [[1, 2], [3]],
        [[[1]], [[2]]],
        "abc",
        np.array(["abc"]),
        {"a": 1},
    ],
)
def test_classify_unsupported(value):
    with raises(TypeError):
        classify(value)
