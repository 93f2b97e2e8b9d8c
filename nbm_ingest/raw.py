"""
Raw tokenizer for NBM 1D viewer CSV exports.

Input structure:
  - Line 1: header row (<valid-time label>, <col1>, <col2>, ...)
  - Lines 2+: data rows (<YYYYMMDDHH>, <v1>, <v2>, ...)

The first header field only labels the valid-time column and is
discarded. Value cells are either a number or anything else (blank,
"bad", ...), which is stored as missing.

The parser produces three parallel arrays: column names, row valid
times and a flat row-major array of cells. It does not check that they
agree; ``ColumnarStore.create()`` does that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

import numpy as np
import pandas as pd

from nbm_ingest.config import ParseConfig
from nbm_ingest.exceptions import MalformedInputError

logger = logging.getLogger(__name__)

# Cells are single precision in the NBM export
VALUE_DTYPE = "Float32"

_TIMESTAMP_LEN = 10


@dataclass
class RawTable:
    """Output of ``RawParser.parse_full()``.

    Attributes:
        cols: Column names from the header, trimmed, in file order.
        rows: Valid time of every data row that was kept.
        values: Flat row-major cells (nullable ``Float32``); ``pd.NA``
            marks a missing cell.
        dropped_rows: Data rows skipped because their valid time did
            not decode.
    """
    cols: list[str]
    rows: list[datetime]
    values: pd.api.extensions.ExtensionArray
    dropped_rows: int = 0


def parse_timestamp(text: str) -> datetime | None:
    """Decode a ``YYYYMMDDHH`` valid time.

    Returns ``None`` if the trimmed text is not exactly 10 ASCII digits
    or does not name a real calendar hour (month 13, hour 24, ...).
    """
    vt_str = text.strip()
    if len(vt_str) != _TIMESTAMP_LEN or not (vt_str.isascii() and vt_str.isdigit()):
        return None
    try:
        return datetime(
            int(vt_str[0:4]),
            int(vt_str[4:6]),
            int(vt_str[6:8]),
            int(vt_str[8:10]),
        )
    except ValueError:
        return None


class RawParser:
    """Splits an NBM export into header, valid times and cells."""

    def __init__(self, text: str, config: ParseConfig | None = None) -> None:
        self.config = config or ParseConfig()
        # Only \n (or \r\n) ends a line. Blank lines carry no row.
        lines = (line.rstrip("\r") for line in text.split("\n"))
        self._lines = [line for line in lines if line.strip()]

    def count_rows_and_cols(self) -> tuple[int, int]:
        """Count the data rows and value columns in the text.

        Neither count includes the header row or the valid-time column.

        Raises:
            MalformedInputError: If the text has no header line.
        """
        if not self._lines:
            raise MalformedInputError("Input is empty: no header line found.")

        # -1 to remove the valid time column
        num_cols = len(self._lines[0].split(",")) - 1
        # -1 to remove the header row
        num_rows = len(self._lines) - 1

        logger.debug("Counted %d rows x %d columns", num_rows, num_cols)
        return num_rows, num_cols

    def parse_full(self, num_rows: int, num_cols: int) -> RawTable:
        """Parse the header, the valid times and every cell.

        Args:
            num_rows: Row count from ``count_rows_and_cols()``.
            num_cols: Column count from ``count_rows_and_cols()``.

        Returns:
            RawTable with the three parallel arrays.

        Raises:
            MalformedInputError: If a row or cell is malformed and the
                config asks for strict handling.
        """
        if not self._lines:
            raise MalformedInputError("Input is empty: no header line found.")

        # Skip 1st column because that is the valid time.
        cols = [header.strip() for header in self._lines[0].split(",")[1:]]

        rows: list[datetime] = []
        row_lines: list[int] = []
        tokens: list[str] = []
        dropped = 0

        for line_no, line in enumerate(self._lines[1:], start=2):
            fields = line.split(",")
            vt = parse_timestamp(fields[0])
            if vt is None:
                if self.config.bad_timestamp == "raise":
                    raise MalformedInputError(
                        f"Line {line_no}: cannot decode valid time {fields[0]!r} "
                        "(expected YYYYMMDDHH)"
                    )
                logger.warning(
                    "Dropping line %d: cannot decode valid time %r",
                    line_no, fields[0],
                )
                dropped += 1
                continue

            rows.append(vt)
            row_lines.append(line_no)
            tokens.extend(val_str.strip() for val_str in fields[1:])

        values = self._convert_values(tokens, cols, row_lines, num_cols)

        logger.info(
            "Parsed %d of %d data rows (%d dropped), %d columns",
            len(rows), num_rows, dropped, len(cols),
        )
        return RawTable(cols=cols, rows=rows, values=values, dropped_rows=dropped)

    def _convert_values(
        self,
        tokens: list[str],
        cols: list[str],
        row_lines: list[int],
        num_cols: int,
    ) -> pd.api.extensions.ExtensionArray:
        """Convert cell tokens to a nullable Float32 array in one pass.

        Empty strings and non-numeric tokens become ``pd.NA``.
        """
        series = pd.Series(tokens, dtype=object)
        numeric = pd.to_numeric(series, errors="coerce")

        if self.config.bad_value == "raise":
            bad = numeric.isna() & series.ne("")
            if bad.any():
                idx = int(bad.idxmax())
                row, col = divmod(idx, num_cols) if num_cols else (0, idx)
                line_no = row_lines[row] if row < len(row_lines) else "?"
                col_name = cols[col] if col < len(cols) else f"#{col}"
                raise MalformedInputError(
                    f"Line {line_no}: value {tokens[idx]!r} in column "
                    f"{col_name!r} is not a number"
                )

        # Out-of-range magnitudes become +/-inf, as a float32 parse would give
        with np.errstate(over="ignore"):
            return numeric.astype(VALUE_DTYPE).array
