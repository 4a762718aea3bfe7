"""Import/export formats for secrets: env, json and yaml."""

import json
from typing import Iterable

import yaml

from .vault.exceptions import UnsupportedFormatError

SUPPORTED_FORMATS = ("env", "json", "yaml")


def normalize_format(fmt: str) -> str:
    """Lowercase and validate a format name (yml is an alias for yaml)."""
    fmt = fmt.lower()
    if fmt == "yml":
        fmt = "yaml"
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(fmt)
    return fmt


def render_secrets(pairs: Iterable[tuple[str, str]], fmt: str = "env") -> str:
    """
    Render (key, value) pairs for export.

    env output uppercases keys, one KEY=value per line.

    Raises:
        UnsupportedFormatError: For unknown formats
    """
    fmt = normalize_format(fmt)
    pairs = list(pairs)

    if fmt == "env":
        return "\n".join(f"{key.upper()}={value}" for key, value in pairs)

    mapping = dict(pairs)
    if fmt == "json":
        return json.dumps(mapping, indent=2, ensure_ascii=False)
    return yaml.safe_dump(mapping, default_flow_style=False, sort_keys=False, allow_unicode=True)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_env(content: str) -> dict[str, str]:
    """Parse KEY=value lines. Blank lines, comments and lines without '=' are skipped."""
    secrets = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        if not sep or not key.strip():
            continue
        secrets[key.strip()] = _unquote(value.strip())
    return secrets


def parse_secrets(content: str, fmt: str = "env") -> dict[str, str]:
    """
    Parse an import file into a key -> value mapping.

    Raises:
        UnsupportedFormatError: For unknown formats
        ValueError: If json/yaml content is not a flat mapping
    """
    fmt = normalize_format(fmt)

    if fmt == "env":
        return parse_env(content)

    if fmt == "json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON: {e}") from e
    else:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Expected a mapping of secret names to values")

    secrets = {}
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            raise ValueError(f"Value for '{key}' must be a scalar")
        secrets[str(key)] = "" if value is None else str(value)
    return secrets
