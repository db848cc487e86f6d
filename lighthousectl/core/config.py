"""Loading and validation of the optional YAML scan configuration."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import sys
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from lighthousectl.core.errors import ConfigError
from lighthousectl.core.model import ScanSettings

LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


@dataclass(frozen=True)
class LoadedSettings:
    settings: ScanSettings
    source: Path | None
    warnings: tuple[str, ...]


def _load_schema_validator() -> Any:
    schema_text = resources.files("lighthousectl.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def default_config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / "lighthousectl/config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at root")
    return loaded


def _build_settings(doc: dict[str, Any], source: Path) -> ScanSettings:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    defaults = ScanSettings()
    values: dict[str, Any] = {}
    for field in dataclasses.fields(ScanSettings):
        if field.name not in doc:
            continue
        default = getattr(defaults, field.name)
        value = doc[field.name]
        values[field.name] = float(value) if isinstance(default, float) else value
    return dataclasses.replace(defaults, **values)


def load_settings(path: Path | None = None) -> LoadedSettings:
    """Load scan settings from ``path`` or the per-user config file.

    An explicit path must exist; the per-user file is optional and built-in
    defaults apply when it is absent.
    """
    warnings: list[str] = []
    if path is None:
        path = default_config_path()
        if not path.is_file():
            return LoadedSettings(settings=ScanSettings(), source=None, warnings=())

    settings = _build_settings(_read_yaml(path), path)
    if settings.adapter and not sys.platform.startswith("linux"):
        warning = f"Config {path} sets adapter '{settings.adapter}', which is only honored on BlueZ"
        LOGGER.warning(warning)
        warnings.append(warning)
    return LoadedSettings(settings=settings, source=path, warnings=tuple(warnings))
