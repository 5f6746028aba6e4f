from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from titleholders.models.config_models import (
    DEFAULT_NUMERIC_COLUMNS,
    EXPECTED_ARITY,
    FieldRoles,
    NormalizerConfig,
)

"""Config loader.

Responsibilities:
- Load YAML (config/normalizer.yml by default)
- Validate against config_schema.json shipped beside this module
- Apply defaults and cross-field checks the schema cannot express
  (column arity, duplicate names, role columns present)
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/normalizer.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not valid JSON, or the data
            violates the schema (missing keys, wrong types, extra keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _check_columns(columns: list[str], numeric: list[str], roles: FieldRoles) -> None:
    if len(columns) != EXPECTED_ARITY:
        raise ConfigError(f"columns: expected {EXPECTED_ARITY} names, got {len(columns)}")
    dupes = sorted({c for c in columns if columns.count(c) > 1})
    if dupes:
        raise ConfigError(f"columns: duplicate names {dupes}")
    known = set(columns)
    unknown_numeric = [c for c in numeric if c not in known]
    if unknown_numeric:
        raise ConfigError(f"numeric_columns: not in columns {unknown_numeric}")
    unknown_roles = {k: v for k, v in roles.as_dict().items() if v not in known}
    if unknown_roles:
        raise ConfigError(f"fields: not in columns {unknown_roles}")


def config_from_dict(data: dict[str, Any]) -> NormalizerConfig:
    """Build a NormalizerConfig from already parsed YAML data."""
    _validate_config_schema(data)

    columns = list(data["columns"])
    numeric = list(data.get("numeric_columns", DEFAULT_NUMERIC_COLUMNS))
    roles = FieldRoles(**(data.get("fields") or {}))
    _check_columns(columns, numeric, roles)

    return NormalizerConfig(
        source_file=data["source_file"],
        columns=tuple(columns),
        sheet_name=data.get("sheet_name"),
        artifact_row_index=data.get("artifact_row_index", 1),
        placeholder_markers=tuple(data.get("placeholder_markers", ["*"])),
        numeric_columns=tuple(numeric),
        fields=roles,
        miss_log_dir=data.get("miss_log_dir"),
    )


def load_config(path: Path) -> NormalizerConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return config_from_dict(data)
