"""Assemble per-row extraction results into a nullable string column."""

from __future__ import annotations

from collections.abc import Iterable

import pyarrow as pa


class OutputBuilder:
    """Collect results in row order and finalize them into an Arrow array.

    Nothing is visible to the caller until :meth:`finish`; a builder that is
    discarded or abandoned on error releases its partial values.
    """

    def __init__(self, num_rows: int, result_type: pa.DataType) -> None:
        self._num_rows = num_rows
        self._result_type = result_type
        self._values: list[str | None] | None = []

    def __len__(self) -> int:
        return len(self._require_open())

    def _require_open(self) -> list[str | None]:
        if self._values is None:
            msg = "Output builder is already finalized or discarded."
            raise RuntimeError(msg)
        return self._values

    def append(self, value: str | None) -> None:
        """Append one result; ``None`` is a null slot, ``""`` an empty string."""
        values = self._require_open()
        if len(values) >= self._num_rows:
            msg = f"Output builder is full at {self._num_rows} row(s)."
            raise ValueError(msg)
        values.append(value)

    def extend(self, values: Iterable[str | None]) -> None:
        """Append results for consecutive rows."""
        for value in values:
            self.append(value)

    def discard(self) -> None:
        """Drop partial results without producing a column."""
        self._values = None

    def finish(self) -> pa.Array:
        """Finalize the column and release builder state.

        Returns
        -------
        pyarrow.Array
            Nullable string array with one entry per row.

        Raises
        ------
        ValueError
            Raised when fewer results than rows were appended.
        """
        values = self._require_open()
        if len(values) != self._num_rows:
            msg = f"Output builder holds {len(values)} of {self._num_rows} row(s)."
            raise ValueError(msg)
        self._values = None
        return pa.array(values, type=self._result_type)


__all__ = ["OutputBuilder"]
