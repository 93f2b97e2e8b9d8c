"""
nbm-ingest: parse NBM (National Blend of Models) 1D viewer CSV exports.

Public API surface:

- ``parse(text, ...)`` -- **recommended entry point**. Takes the whole
  file contents (reading the file is up to the caller) and returns an
  immutable ``ColumnarStore``.

- ``ColumnarStore.initialization_time()`` -- valid time of the first
  data row, the nominal model run time.

- ``ColumnarStore.column_iter(name)`` -- lazy iterator of
  ``(valid_time, value)`` pairs for one column, skipping missing cells.

Parse policies for malformed rows and cells are set with
``ParseConfig`` (or ``bad_timestamp=`` / ``bad_value=`` keywords).
"""

from __future__ import annotations

import logging

from nbm_ingest.config import ParseConfig, load_config, save_config
from nbm_ingest.exceptions import (
    ConfigValidationError,
    GeneralError,
    InternalError,
    MalformedInputError,
    NbmIngestError,
    NoSuchColumnError,
    ShapeMismatchError,
)
from nbm_ingest.store import ColumnarStore, ColumnIterator, StoreInfo

__all__ = [
    "parse",
    "ColumnarStore",
    "ColumnIterator",
    "StoreInfo",
    "ParseConfig",
    "load_config",
    "save_config",
    "NbmIngestError",
    "GeneralError",
    "InternalError",
    "NoSuchColumnError",
    "MalformedInputError",
    "ShapeMismatchError",
    "ConfigValidationError",
]

logger = logging.getLogger(__name__)


def parse(text: str, config: ParseConfig | None = None, **overrides: str) -> ColumnarStore:
    """Parse the text of an NBM 1D viewer export.

    Args:
        text: The whole file contents.
        config: Row/cell policies. Defaults to ``ParseConfig()``: rows
            with an undecodable valid time are dropped and counted,
            non-numeric cells are missing.
        **overrides: Individual ``ParseConfig`` fields, applied on top
            of *config* (e.g. ``bad_timestamp="raise"``).

    Returns:
        A validated ``ColumnarStore``.

    Raises:
        MalformedInputError: If the text is empty, or a row or cell is
            malformed under a strict policy.
        ShapeMismatchError: If the rows and header disagree in width.
        pydantic.ValidationError: If an override is not a valid policy.

    Examples::

        store = nbm_ingest.parse(text)
        print(store.initialization_time())
        for vt, val in store.column_iter("TMP_2 m above ground"):
            ...

        strict = nbm_ingest.parse(text, bad_timestamp="raise")
    """
    if config is None:
        config = ParseConfig(**overrides)
    elif overrides:
        config = ParseConfig.model_validate({**config.model_dump(), **overrides})

    logger.debug("parse() -- %d characters, config=%s", len(text), config)
    return ColumnarStore.create(text, config)
