"""Configuration loading and validation for sbchargelimit."""

from __future__ import annotations

import json
import logging
import os
import re
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validators

from sbchargelimit.core.errors import ConfigError, ConfigValidationError
from sbchargelimit.core.model import Config, DeviceConfig, DeviceKind, Thresholds, normalize_address

APP_NAME = "sbchargelimit"
_MAC_RE = re.compile(r"^[0-9A-F]{2}(?::[0-9A-F]{2}){5}$")
LOGGER = logging.getLogger(__name__)


class UniqueKeyLoader(yaml.SafeLoader):
    """YAML loader that rejects duplicate mapping keys."""


# YAML 1.1 reads `11:22:33:44:55:50` as a base-60 integer; keep ints decimal, hex, octal or binary.
_INT_TAG = "tag:yaml.org,2002:int"
_INT_RE = re.compile(
    r"""^(?:[-+]?0b[0-1_]+
    |[-+]?0[0-7_]+
    |[-+]?(?:0|[1-9][0-9_]*)
    |[-+]?0x[0-9a-fA-F_]+)$""",
    re.X,
)

UniqueKeyLoader.yaml_implicit_resolvers = {
    key: list(value) for key, value in yaml.SafeLoader.yaml_implicit_resolvers.items()
}

for first_char, mappings in list(UniqueKeyLoader.yaml_implicit_resolvers.items()):
    UniqueKeyLoader.yaml_implicit_resolvers[first_char] = [
        (tag, _INT_RE if tag == _INT_TAG else regexp)
        for tag, regexp in mappings
    ]


def _construct_mapping(loader: UniqueKeyLoader, node: yaml.Node, deep: bool = False) -> dict[str, Any]:
    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = loader.construct_object(key_node, deep=deep)
        if key in mapping:
            raise ConfigValidationError(f"Duplicate key '{key}' in YAML document")
        mapping[key] = loader.construct_object(value_node, deep=deep)
    return mapping


UniqueKeyLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG,
    _construct_mapping,
)


def _load_schema_validator() -> Any:
    schema_text = resources.files("sbchargelimit.schemas").joinpath("config.schema.json").read_text(
        encoding="utf-8"
    )
    schema = json.loads(schema_text)
    validator_cls = validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def config_path() -> Path:
    xdg_config = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return xdg_config / APP_NAME / "config.yaml"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(
            f"No configuration at {path}. Run 'sbchargelimit config --init' to create one."
        ) from exc
    except OSError as exc:
        raise ConfigError(f"Could not read configuration {path}: {exc}") from exc

    try:
        loaded = yaml.load(content, Loader=UniqueKeyLoader)
    except yaml.YAMLError as exc:
        raise ConfigValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigValidationError(f"Configuration {path} must contain a mapping at root")
    return loaded


def normalize_mac(value: str, *, context: str) -> str:
    normalized = normalize_address(value)
    if not _MAC_RE.match(normalized):
        raise ConfigValidationError(f"{context} must be a colon-delimited MAC address, got '{value}'")
    return normalized


def validate_thresholds(start_thresh: float, stop_thresh: float) -> Thresholds:
    if not 0.0 <= start_thresh <= 1.0 or not 0.0 <= stop_thresh <= 1.0:
        raise ConfigValidationError("start_thresh and stop_thresh must be within [0, 1]")
    if start_thresh >= stop_thresh:
        raise ConfigValidationError(
            f"start_thresh ({start_thresh}) must be lower than stop_thresh ({stop_thresh})"
        )
    return Thresholds(start_thresh=start_thresh, stop_thresh=stop_thresh)


def build_config(doc: dict[str, Any], source: Path | str = "<config>") -> Config:
    validator = _load_schema_validator()
    try:
        validator.validate(doc)
    except ValidationError as exc:
        path = ".".join(str(p) for p in exc.path)
        where = f" ({path})" if path else ""
        raise ConfigValidationError(f"Schema validation failed for {source}{where}: {exc.message}") from exc

    devices: list[DeviceConfig] = []
    for index, entry in enumerate(doc["devices"]):
        devices.append(
            DeviceConfig(
                kind=DeviceKind(entry["kind"]),
                address=normalize_mac(entry["address"], context=f"devices.{index}.address"),
                search_timeout=float(entry.get("search_timeout", 10)),
            )
        )

    addresses = [d.address for d in devices]
    for address in sorted(set(addresses)):
        if addresses.count(address) > 1:
            LOGGER.warning("Device %s is configured more than once; the first entry wins", address)

    return Config(
        devices=tuple(devices),
        thresholds=validate_thresholds(
            float(doc.get("start_thresh", 0.5)),
            float(doc.get("stop_thresh", 0.6)),
        ),
        interval_s=float(doc.get("interval_s", 60)),
        response_timeout_s=float(doc.get("response_timeout_s", 5)),
        connect_timeout_s=float(doc.get("connect_timeout_s", 10)),
    )


def load_config(path: Path | None = None) -> Config:
    path = path or config_path()
    LOGGER.info("Loading config from %s", path)
    return build_config(_read_yaml(path), path)


def write_default_config(path: Path | None = None, *, overwrite: bool = False) -> Path:
    path = path or config_path()
    if path.exists() and not overwrite:
        raise ConfigError(f"Configuration already exists at {path}")
    template = resources.files("sbchargelimit.schemas").joinpath("config.default.yaml").read_text(
        encoding="utf-8"
    )
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(template, encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not write configuration {path}: {exc}") from exc
    return path
