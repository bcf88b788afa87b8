# src/shade_catalog/utils/load_config.py

"""Load a JSON object from the <data/> directory, validate it, and cache the result.

The validator turns the parsed object into whatever the caller needs (the
classification rule loader passes build_classifier_config). Results are cached
per file, mtime and validator, so editing the file invalidates the entry.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

# --- optional json5 support (no hard dependency) -----------------------------
try:  # json5 may be missing in most envs
    import json5 as _json5
except ImportError:  # pragma: no cover - only hit when json5 missing
    _json5 = None  # type: ignore[assignment]

DATA_DIR_ENV_VARS = ("DATA_DIR", "SHADE_CATALOG_DATA_DIR")
__all__ = [
    "load_config",
    "clear_config_cache",
    "DataDirNotFound",
    "ConfigFileNotFound",
    "ConfigParseError",
    "ConfigTypeError",
]


# ── Exceptions ───────────────────────────────────────────────────────────────
class DataDirNotFound(FileNotFoundError):
    """Raise when no 'data' directory is found while walking upwards."""


class ConfigFileNotFound(FileNotFoundError):
    """Raise when the requested config file cannot be read or resolved."""


class ConfigParseError(ValueError):
    """Raise when JSON parsing/validation fails for a config file."""


class ConfigTypeError(TypeError):
    """Raise when the config file does not hold a JSON object."""


log = logging.getLogger(__name__)
_CACHE_LOCK = threading.RLock()
# (path, mtime, encoding, allow_comments, validator) → validated result
_CONFIG_CACHE: dict[tuple[Path, float, str, bool, Any], Any] = {}


def clear_config_cache() -> None:
    """Empty the in-memory config cache."""
    with _CACHE_LOCK:
        _CONFIG_CACHE.clear()


# ── Locating files ───────────────────────────────────────────────────────────
def _data_dir(base_dir: Path | None) -> Path:
    """Explicit base_dir, else DATA_DIR / SHADE_CATALOG_DATA_DIR, else the first
    data/ or Data/ folder found walking up from the cwd."""
    if base_dir is not None:
        return Path(base_dir).resolve()
    for var in DATA_DIR_ENV_VARS:
        value = os.environ.get(var)
        if value:
            return Path(os.path.expanduser(value)).resolve()
    tried: list[Path] = []
    cwd = Path.cwd().resolve()
    for parent in (cwd, *cwd.parents):
        for name in ("data", "Data"):
            cand = parent / name
            if cand.is_dir():
                return cand
            tried.append(cand)
    raise DataDirNotFound("No 'data' directory found. Tried:\n  " + "\n  ".join(map(str, tried)))


def _config_path(file: str | os.PathLike[str], data_dir: Path) -> Path:
    name = os.fspath(file)
    if not name.endswith((".json", ".json5")):
        name = f"{name}.json"
    path = (data_dir / name).resolve()
    try:
        path.relative_to(data_dir)
    except ValueError as e:
        raise ConfigFileNotFound(f"Refusing to read outside {data_dir}: {path}") from e
    if not path.is_file():
        raise ConfigFileNotFound(f"Config file not found: {path}")
    return path


def _read_object(path: Path, encoding: str, allow_comments: bool) -> dict[str, Any]:
    try:
        with path.open("r", encoding=encoding) as f:
            if allow_comments:
                if _json5 is None:
                    raise ConfigParseError("allow_comments=True needs the json5 package")
                data = _json5.load(f)
            else:
                data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigFileNotFound(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigTypeError(f"{path.name}: expected a JSON object, got {type(data).__name__}")
    return data


# ── Public API ───────────────────────────────────────────────────────────────
def load_config(
    file: str | os.PathLike[str],
    *,
    base_dir: Path | None = None,
    validator: Callable[[dict[str, Any]], Any] | None = None,
    encoding: str = "utf-8",
    allow_comments: bool = False,
) -> Any:
    """
    Does: Read <data>/<file>.json as a JSON object and pass it through validator.
    Returns: validator(data), or the dict itself without a validator. Cached.
    Raises: DataDirNotFound, ConfigFileNotFound, ConfigTypeError, or
            ConfigParseError (bad JSON, or any error raised by the validator).
    """
    path = _config_path(file, _data_dir(base_dir))
    key = (path, path.stat().st_mtime, encoding, allow_comments, validator)

    with _CACHE_LOCK:
        if key in _CONFIG_CACHE:
            log.debug("Config cache HIT: %s", path.name)
            return _CONFIG_CACHE[key]

    data = _read_object(path, encoding, allow_comments)
    if validator is None:
        result: Any = data
    else:
        try:
            result = validator(data)
        except Exception as e:
            raise ConfigParseError(f"{path.name}: {e}") from e

    with _CACHE_LOCK:
        _CONFIG_CACHE[key] = result
    log.debug("Config loaded: %s", path.name)
    return result
