"""
Runtime configuration for httpreader.

Values are resolved in order from:
- HTTPREADER_* environment variables
- a JSON file (~/.httpreader/config.json, or the path in HTTPREADER_CONFIG)
- built-in defaults
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from dataclasses import fields
from pathlib import Path
from typing import Any
from typing import Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "HTTPREADER_"
DEFAULT_CONFIG_PATH = Path("~/.httpreader/config.json")

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_TRUE_VALUES = ("1", "true", "yes")


@dataclass
class Config:
    """Process-wide defaults for pipeline execution."""

    # Stop at the first failing step when execute() is not told otherwise
    halt_on_failure: bool = True
    # Drop the consumed token from content-encoding after decompression
    strip_consumed_encoding: bool = False
    # Charset used to decode text bodies whose content type has none
    default_charset: str = "utf-8"
    log_level: str = "INFO"

    @classmethod
    def load(
        cls,
        environ: Mapping[str, str] | None = None,
        path: Path | str | None = None,
    ) -> Config:
        """
        Build a Config from the environment and the optional JSON file.

        Args:
            environ: Environment mapping (defaults to os.environ)
            path: Config file path (defaults to HTTPREADER_CONFIG or ~/.httpreader/config.json)
        """
        if environ is None:
            environ = os.environ

        if path is None:
            path = environ.get(f"{ENV_PREFIX}CONFIG", DEFAULT_CONFIG_PATH)

        values: dict[str, Any] = cls._read_file(Path(path).expanduser())

        for f in fields(cls):
            raw = environ.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is not None:
                values[f.name] = raw

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in values:
                continue
            value = values[f.name]
            if f.type in ("bool", bool) and isinstance(value, str):
                value = value.strip().lower() in _TRUE_VALUES
            kwargs[f.name] = value

        return cls(**kwargs)

    @staticmethod
    def _read_file(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}

        try:
            with open(path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable config file {path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring config file {path}: expected a JSON object")
            return {}

        return data


def configure_logging(level: str | int | None = None) -> None:
    """
    Send httpreader logs to stderr.

    The library installs no handlers on import; applications that want its
    output call this once at startup.
    """
    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("httpreader").setLevel(level)


config = Config.load()
