"""
Columnar store for a parsed NBM 1D viewer export.

``ColumnarStore`` owns the three parallel arrays produced by the raw
parser (column names, row valid times, flat row-major cells) after
checking that their lengths agree. It is immutable once built.

Reading is column oriented: ``column_iter(name)`` returns a
``ColumnIterator`` that walks the rows of one column lazily and yields
``(valid_time, value)`` pairs, skipping missing cells. Each iterator
owns its own cursor, so any number of them can read the same store.

Typical use::

    store = ColumnarStore.create(text)
    for vt, val in store.column_iter("APCP24hr_surface_90% level"):
        print(vt, val)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from nbm_ingest.config import ParseConfig
from nbm_ingest.exceptions import GeneralError, NoSuchColumnError, ShapeMismatchError
from nbm_ingest.raw import RawParser

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# StoreInfo -- lightweight metadata snapshot
# ---------------------------------------------------------------------------

@dataclass
class StoreInfo:
    """Summary of a store, returned by ``ColumnarStore.describe()``.

    Attributes:
        initialization_time: Valid time of the first data row, or
            ``None`` for a header-only file.
        num_rows: Number of data rows kept.
        num_cols: Number of value columns.
        columns: Column names in header order.
        dropped_rows: Rows skipped because their valid time did not decode.
        missing: Column name -> number of missing cells. For duplicated
            names the first column wins, as in ``column_iter()``.
    """

    initialization_time: datetime | None
    num_rows: int
    num_cols: int
    columns: list[str] = field(default_factory=list)
    dropped_rows: int = 0
    missing: dict[str, int] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# ColumnarStore
# ---------------------------------------------------------------------------

class ColumnarStore:
    """A parsed NBM 1D viewer CSV file.

    Build one with ``ColumnarStore.create(text)`` (or ``nbm_ingest.parse``).
    The constructor checks the shape invariants and raises
    ``ShapeMismatchError`` rather than hold inconsistent arrays.
    """

    def __init__(
        self,
        cols: list[str],
        rows: list[datetime],
        values: pd.api.extensions.ExtensionArray,
        num_rows: int,
        num_cols: int,
        dropped_rows: int = 0,
    ) -> None:
        if len(cols) != num_cols:
            raise ShapeMismatchError("column names", num_cols, len(cols))
        if len(rows) != num_rows:
            raise ShapeMismatchError("data rows", num_rows, len(rows))
        if len(values) != num_rows * num_cols:
            raise ShapeMismatchError(
                "cells (rows x columns)", num_rows * num_cols, len(values)
            )

        self._cols = tuple(cols)
        self._rows = tuple(rows)
        self._vals = values.copy()
        self._num_rows = num_rows
        self._num_cols = num_cols
        self._dropped_rows = dropped_rows
        self._init_time = self._rows[0] if self._rows else None

    @classmethod
    def create(cls, text: str, config: ParseConfig | None = None) -> ColumnarStore:
        """Parse NBM export text into a store.

        Args:
            text: The whole file contents.
            config: Row/cell policies; defaults to ``ParseConfig()``.

        Returns:
            A fully validated ``ColumnarStore``.

        Raises:
            MalformedInputError: If the text is empty, or a row or cell is
                malformed under a strict policy.
            ShapeMismatchError: If the rows do not all have one cell per
                header column.
        """
        raw = RawParser(text, config)
        num_rows, num_cols = raw.count_rows_and_cols()
        table = raw.parse_full(num_rows, num_cols)

        # Dropped rows were counted from the line count but never parsed
        store = cls(
            cols=table.cols,
            rows=table.rows,
            values=table.values,
            num_rows=num_rows - table.dropped_rows,
            num_cols=num_cols,
            dropped_rows=table.dropped_rows,
        )
        logger.debug("Created %r", store)
        return store

    @classmethod
    def from_str(cls, text: str) -> ColumnarStore:
        """Parse with the default policies. Same as ``create(text)``."""
        return cls.create(text)

    # -- Properties ---------------------------------------------------------

    @property
    def cols(self) -> tuple[str, ...]:
        return self._cols

    @property
    def rows(self) -> tuple[datetime, ...]:
        return self._rows

    @property
    def values(self) -> pd.api.extensions.ExtensionArray:
        """A copy of the flat row-major cells (nullable ``Float32``)."""
        return self._vals.copy()

    @property
    def num_rows(self) -> int:
        return self._num_rows

    @property
    def num_cols(self) -> int:
        return self._num_cols

    @property
    def dropped_rows(self) -> int:
        return self._dropped_rows

    def __len__(self) -> int:
        return self._num_rows

    def __contains__(self, name: object) -> bool:
        return name in self._cols

    def __repr__(self) -> str:
        return (
            f"ColumnarStore(rows={self._num_rows}, cols={self._num_cols}, "
            f"initialization_time={self._init_time!r}, "
            f"dropped_rows={self._dropped_rows})"
        )

    # -- Queries ------------------------------------------------------------

    def initialization_time(self) -> datetime:
        """Get the initialization time (valid time of the first data row).

        Raises:
            GeneralError: If the store has no data rows.
        """
        if self._init_time is None:
            raise GeneralError(
                "Initialization time is undefined: the input has no data rows."
            )
        return self._init_time

    def column_iter(self, name: str) -> ColumnIterator:
        """Get an iterator over the present values of a column.

        If a name appears more than once in the header, the first
        occurrence is used.

        Raises:
            NoSuchColumnError: If no column has this exact name.
        """
        try:
            col = self._cols.index(name)
        except ValueError:
            raise NoSuchColumnError(name) from None
        return ColumnIterator(self, col)

    def get_vals(self, row: int, col: int) -> tuple[datetime, float] | None:
        """Return ``(valid_time, value)`` for one cell, or ``None`` if missing.

        Raises:
            IndexError: If *row* or *col* is outside the store.
        """
        if not 0 <= row < self._num_rows:
            raise IndexError(f"row {row} out of range for {self._num_rows} rows")
        if not 0 <= col < self._num_cols:
            raise IndexError(f"column {col} out of range for {self._num_cols} columns")

        val = self._vals[row * self._num_cols + col]
        if pd.isna(val):
            return None
        return self._rows[row], float(val)

    def to_frame(self) -> pd.DataFrame:
        """Return the whole grid as a DataFrame.

        The index is a ``DatetimeIndex`` named ``valid_time``; there is one
        nullable ``Float32`` column per header name, in header order
        (duplicates kept).
        """
        n = self._num_cols
        frame = pd.DataFrame(
            {i: self._vals[i::n] for i in range(n)},
            index=pd.DatetimeIndex(list(self._rows), name="valid_time"),
        )
        frame.columns = list(self._cols)
        return frame

    def describe(self) -> StoreInfo:
        """Summarise the store without materialising a DataFrame."""
        n = self._num_cols
        missing: dict[str, int] = {}
        for i, name in enumerate(self._cols):
            missing.setdefault(name, int(self._vals[i::n].isna().sum()))
        return StoreInfo(
            initialization_time=self._init_time,
            num_rows=self._num_rows,
            num_cols=n,
            columns=list(self._cols),
            dropped_rows=self._dropped_rows,
            missing=missing,
        )


# ---------------------------------------------------------------------------
# ColumnIterator
# ---------------------------------------------------------------------------

class ColumnIterator:
    """An iterator over the values of a column and their valid times.

    Returned by ``ColumnarStore.column_iter()``. Single pass: once
    exhausted it stays exhausted; call ``column_iter()`` again for a new
    pass.
    """

    def __init__(self, store: ColumnarStore, col: int) -> None:
        self._store = store
        self._col = col
        self._next_row = 0

    @property
    def column(self) -> int:
        """Index of the column being iterated."""
        return self._col

    @property
    def name(self) -> str:
        return self._store.cols[self._col]

    def __iter__(self) -> ColumnIterator:
        return self

    def __next__(self) -> tuple[datetime, float]:
        while self._next_row < self._store.num_rows:
            vals = self._store.get_vals(self._next_row, self._col)
            self._next_row += 1
            if vals is not None:
                return vals
        raise StopIteration

    def __repr__(self) -> str:
        return f"ColumnIterator(column={self.name!r}, next_row={self._next_row})"
