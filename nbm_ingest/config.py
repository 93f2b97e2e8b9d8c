"""
Parse policy configuration and YAML I/O for nbm-ingest.

The NBM 1D viewer exports occasionally contain rows whose valid-time
field is damaged and cells that are not numbers. What to do with them
is a policy choice, so it lives here instead of being hard-coded in
the parser.

Key model:
- ParseConfig: how malformed timestamps and malformed value cells
  are treated.

Key functions:
- load_config(path) -> ParseConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from nbm_ingest.exceptions import ConfigValidationError, InternalError

logger = logging.getLogger(__name__)


class ParseConfig(BaseModel):
    """Row and cell policies applied by the raw parser.

    The defaults reproduce the behaviour of the NBM viewer tools: rows
    with an unreadable valid time are dropped (and counted), cells that
    are not numbers are treated as missing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    bad_timestamp: Literal["drop", "raise"] = Field(
        "drop",
        description=(
            "'drop' skips a data row whose valid time does not decode and "
            "counts it; 'raise' fails the whole parse with MalformedInputError"
        ),
    )
    bad_value: Literal["missing", "raise"] = Field(
        "missing",
        description=(
            "'missing' stores a non-numeric cell as absent; 'raise' fails "
            "the parse on any non-empty cell that is not a number"
        ),
    )


def load_config(path: str | Path) -> ParseConfig:
    """Load and validate a parse-config YAML file.

    Raises:
        FileNotFoundError: If the config file does not exist.
        InternalError: If the file is not valid YAML.
        ConfigValidationError: If the file is empty or fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InternalError(f"Could not read YAML from {path}: {e}") from e
    if raw is None:
        raise ConfigValidationError(f"Config file is empty: {path}")
    try:
        config = ParseConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid parse config in {path}:\n{e}") from e
    logger.info("Loaded config from %s", path)
    return config


def save_config(config: ParseConfig, path: str | Path) -> None:
    """Serialize a ParseConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        f.write("# nbm-ingest parse configuration\n")
        f.write("# bad_timestamp: drop | raise\n# bad_value: missing | raise\n\n")
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
    logger.info("Saved config to %s", path)
