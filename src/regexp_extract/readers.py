"""Layout-independent row access over Arrow string and integer columns.

Every physical layout gets one reader class exposing ``get(row)`` and ``len()``.
Callers pick a reader through :func:`string_reader` or :func:`integer_reader`
and never branch on the layout themselves.
"""

from __future__ import annotations

import struct
from bisect import bisect_right
from collections.abc import Sequence
from typing import Protocol

import pyarrow as pa
import pyarrow.types as patypes

_INLINE_VIEW_LIMIT = 12
_VIEW_WIDTH = 16
_VIEW_LENGTH = struct.Struct("<i")
_VIEW_REFERENCE = struct.Struct("<4xii")

_INTEGER_FORMATS: dict[tuple[int, bool], str] = {
    (8, True): "b",
    (8, False): "B",
    (16, True): "h",
    (16, False): "H",
    (32, True): "i",
    (32, False): "I",
    (64, True): "q",
    (64, False): "Q",
}

type ColumnLike = pa.Array | pa.ChunkedArray


class StringReader(Protocol):
    """Random row access to a logical sequence of optional strings."""

    def __len__(self) -> int:
        """Return the number of rows."""
        ...

    def get(self, row: int) -> str | None:
        """Return the string at ``row`` or ``None`` for a null slot."""
        ...


class IntegerReader(Protocol):
    """Random row access to a logical sequence of optional integers."""

    def __len__(self) -> int:
        """Return the number of rows."""
        ...

    def get(self, row: int) -> int | None:
        """Return the integer at ``row`` or ``None`` for a null slot."""
        ...


class _ValidityMask:
    """Bit-packed validity bitmap honoring the array offset."""

    __slots__ = ("_bits", "_offset")

    def __init__(self, buffer: pa.Buffer | None, offset: int) -> None:
        self._bits = memoryview(buffer).cast("B") if buffer is not None else None
        self._offset = offset

    def is_valid(self, row: int) -> bool:
        if self._bits is None:
            return True
        index = self._offset + row
        return bool((self._bits[index >> 3] >> (index & 7)) & 1)


def _typed_view(buffer: pa.Buffer | None, fmt: str) -> memoryview:
    if buffer is None:
        return memoryview(b"").cast(fmt)
    raw = memoryview(buffer)
    width = struct.calcsize(fmt)
    usable = (len(raw) // width) * width
    return raw[:usable].cast(fmt)


def _byte_view(buffer: pa.Buffer | None) -> memoryview:
    if buffer is None:
        return memoryview(b"")
    return memoryview(buffer).cast("B")


class OffsetStringReader:
    """Reader for offset-indexed ``string`` and ``large_string`` arrays."""

    __slots__ = ("_base", "_data", "_length", "_offsets", "_validity")

    def __init__(self, array: pa.Array) -> None:
        validity, offsets, data = array.buffers()[:3]
        fmt = "q" if patypes.is_large_string(array.type) else "i"
        self._length = len(array)
        self._base = array.offset
        self._validity = _ValidityMask(validity, array.offset)
        self._offsets = _typed_view(offsets, fmt)
        self._data = _byte_view(data)

    def __len__(self) -> int:
        return self._length

    def get(self, row: int) -> str | None:
        if not self._validity.is_valid(row):
            return None
        index = self._base + row
        start = self._offsets[index]
        end = self._offsets[index + 1]
        return str(self._data[start:end], "utf-8")


class ViewStringReader:
    """Reader for ``string_view`` arrays with inline and out-of-line values."""

    __slots__ = ("_base", "_data", "_length", "_validity", "_views")

    def __init__(self, array: pa.Array) -> None:
        buffers = array.buffers()
        self._length = len(array)
        self._base = array.offset
        self._validity = _ValidityMask(buffers[0], array.offset)
        self._views = _byte_view(buffers[1])
        self._data = tuple(_byte_view(buffer) for buffer in buffers[2:])

    def __len__(self) -> int:
        return self._length

    def get(self, row: int) -> str | None:
        if not self._validity.is_valid(row):
            return None
        start = (self._base + row) * _VIEW_WIDTH
        (length,) = _VIEW_LENGTH.unpack_from(self._views, start)
        if length <= _INLINE_VIEW_LIMIT:
            return str(self._views[start + 4 : start + 4 + length], "utf-8")
        buffer_index, offset = _VIEW_REFERENCE.unpack_from(self._views, start + 4)
        return str(self._data[buffer_index][offset : offset + length], "utf-8")


class FixedWidthIntegerReader:
    """Reader for fixed-width signed and unsigned integer arrays."""

    __slots__ = ("_base", "_length", "_validity", "_values")

    def __init__(self, array: pa.Array) -> None:
        validity, values = array.buffers()[:2]
        fmt = _INTEGER_FORMATS[(array.type.bit_width, patypes.is_signed_integer(array.type))]
        self._length = len(array)
        self._base = array.offset
        self._validity = _ValidityMask(validity, array.offset)
        self._values = _typed_view(values, fmt)

    def __len__(self) -> int:
        return self._length

    def get(self, row: int) -> int | None:
        if not self._validity.is_valid(row):
            return None
        return self._values[self._base + row]


class DictionaryStringReader:
    """Reader resolving dictionary indices against a string dictionary."""

    __slots__ = ("_indices", "_values")

    def __init__(self, array: pa.DictionaryArray) -> None:
        self._indices = FixedWidthIntegerReader(array.indices)
        self._values = string_reader(array.dictionary)

    def __len__(self) -> int:
        return len(self._indices)

    def get(self, row: int) -> str | None:
        index = self._indices.get(row)
        if index is None:
            return None
        return self._values.get(index)


class NullReader:
    """Reader for arrays of the ``null`` type."""

    __slots__ = ("_length",)

    def __init__(self, length: int) -> None:
        self._length = length

    def __len__(self) -> int:
        return self._length

    def get(self, row: int) -> None:
        _ = row


class ChunkedReader[T]:
    """Reader stitching per-chunk readers into one logical column."""

    __slots__ = ("_length", "_readers", "_starts")

    def __init__(self, readers: Sequence[StringReader | IntegerReader]) -> None:
        starts: list[int] = []
        total = 0
        for reader in readers:
            starts.append(total)
            total += len(reader)
        self._readers = tuple(readers)
        self._starts = starts
        self._length = total

    def __len__(self) -> int:
        return self._length

    def get(self, row: int) -> T | None:
        chunk = bisect_right(self._starts, row) - 1
        return self._readers[chunk].get(row - self._starts[chunk])


def is_string_like(dtype: pa.DataType) -> bool:
    """Return True when ``dtype`` decodes to text through a string reader.

    Returns
    -------
    bool
        ``True`` for string, large string, string view, null, and
        dictionaries of those.
    """
    if patypes.is_dictionary(dtype):
        return patypes.is_integer(dtype.index_type) and is_string_like(dtype.value_type)
    return (
        patypes.is_string(dtype)
        or patypes.is_large_string(dtype)
        or patypes.is_string_view(dtype)
        or patypes.is_null(dtype)
    )


def is_integer_like(dtype: pa.DataType) -> bool:
    """Return True when ``dtype`` can be read through an integer reader.

    Returns
    -------
    bool
        ``True`` for any fixed-width integer type or the null type.
    """
    return patypes.is_integer(dtype) or patypes.is_null(dtype)


def string_reader(values: ColumnLike) -> StringReader:
    """Return the reader matching the physical layout of a string column.

    Parameters
    ----------
    values
        Arrow array or chunked array holding string-like values.

    Returns
    -------
    StringReader
        Reader exposing ``get(row) -> str | None``.

    Raises
    ------
    TypeError
        Raised when the column is not string-like.
    """
    if isinstance(values, pa.ChunkedArray):
        return ChunkedReader[str]([string_reader(chunk) for chunk in values.chunks])
    dtype = values.type
    if patypes.is_null(dtype):
        return NullReader(len(values))
    if patypes.is_dictionary(dtype) and is_string_like(dtype):
        return DictionaryStringReader(values)
    if patypes.is_string_view(dtype):
        return ViewStringReader(values)
    if patypes.is_string(dtype) or patypes.is_large_string(dtype):
        return OffsetStringReader(values)
    msg = f"Expected a string-like Arrow column, got {dtype}."
    raise TypeError(msg)


def integer_reader(values: ColumnLike) -> IntegerReader:
    """Return the reader for an integer column.

    Returns
    -------
    IntegerReader
        Reader exposing ``get(row) -> int | None``.

    Raises
    ------
    TypeError
        Raised when the column is not integer-like.
    """
    if isinstance(values, pa.ChunkedArray):
        return ChunkedReader[int]([integer_reader(chunk) for chunk in values.chunks])
    dtype = values.type
    if patypes.is_null(dtype):
        return NullReader(len(values))
    if patypes.is_integer(dtype):
        return FixedWidthIntegerReader(values)
    msg = f"Expected an integer Arrow column, got {dtype}."
    raise TypeError(msg)


__all__ = [
    "ChunkedReader",
    "ColumnLike",
    "DictionaryStringReader",
    "FixedWidthIntegerReader",
    "IntegerReader",
    "NullReader",
    "OffsetStringReader",
    "StringReader",
    "ViewStringReader",
    "integer_reader",
    "is_integer_like",
    "is_string_like",
    "string_reader",
]
