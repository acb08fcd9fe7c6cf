"""Switch configuration: data model, YAML loading and migration of the legacy format."""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from fractions import Fraction
from pathlib import Path
from typing import Any, Mapping

import yaml

CONFIG_KIND = "SwitchConfig"
CONFIG_VERSION = "v1alpha1"
VALID_CONFIG_VERSIONS = frozenset({CONFIG_VERSION})
VAULT_API_ADDRESS_KEY = "vaultAPIAddress"


class ConfigError(Exception):
    """Raised when a configuration cannot be read, parsed or migrated."""


class StoreKind(str, Enum):
    """Kinds of kubeconfig stores."""

    FILESYSTEM = "filesystem"
    VAULT = "vault"
    GARDENER = "gardener"
    GKE = "gke"
    AZURE = "azure"
    EKS = "eks"

    def __str__(self) -> str:
        return self.value


class HookType(str, Enum):
    """Kinds of hooks."""

    EXECUTABLE = "Executable"
    INLINE_COMMAND = "InlineCommand"

    def __str__(self) -> str:
        return self.value


VALID_STORE_KINDS = frozenset(kind.value for kind in StoreKind)
VALID_HOOK_TYPES = frozenset(kind.value for kind in HookType)


@dataclass
class Hook:
    name: str = ""
    type: str = ""
    path: str | None = None
    arguments: list[str] = field(default_factory=list)
    interval: timedelta | None = None


@dataclass
class KubeconfigStore:
    kind: str = ""
    id: str | None = None
    kubeconfig_name: str | None = None
    paths: list[str] = field(default_factory=list)
    refresh_index_after: timedelta | None = None
    required: bool | None = None
    show_prefix: bool | None = None
    config: Any = None


@dataclass
class Config:
    kind: str = ""
    version: str = ""
    kubeconfig_name: str | None = None
    show_preview: bool | None = None
    refresh_index_after: timedelta | None = None
    hooks: list[Hook] = field(default_factory=list)
    kubeconfig_stores: list[KubeconfigStore] = field(default_factory=list)


@dataclass
class KubeconfigPath:
    path: str = ""
    store: str = ""


@dataclass
class ConfigOld:
    kubeconfig_name: str = ""
    kubeconfig_rediscovery_interval: timedelta | None = None
    vault_api_address: str = ""
    hooks: list[Hook] = field(default_factory=list)
    kubeconfig_paths: list[KubeconfigPath] = field(default_factory=list)


# ---------------------------------------------------------------- durations

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(text: str) -> timedelta:
    """Parse a duration such as ``1h30m`` or ``1.5s``."""
    original = text
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    if text == "0":
        return timedelta(0)
    if not text:
        raise ConfigError(f"invalid duration {original!r}")
    total = Fraction(0)
    position = 0
    while position < len(text):
        match = _DURATION_PART.match(text, position)
        if match is None:
            raise ConfigError(f"invalid duration {original!r}")
        number, unit = match.groups()
        total += Fraction(number) * _UNIT_NANOS[unit]
        position = match.end()
    nanoseconds = int(total)
    return sign * timedelta(microseconds=nanoseconds // 1000)


def _with_fraction(value: int, precision: int) -> str:
    whole, fraction = divmod(value, 10**precision)
    if not fraction:
        return str(whole)
    return f"{whole}.{str(fraction).rjust(precision, '0').rstrip('0')}"


def format_duration(value: timedelta) -> str:
    """Render a duration in the compact ``1h0m0s`` notation."""
    nanoseconds = ((value.days * 86400 + value.seconds) * 10**6 + value.microseconds) * 1000
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    nanoseconds = abs(nanoseconds)
    if nanoseconds < 1_000:
        return f"{sign}{nanoseconds}ns"
    if nanoseconds < 1_000_000:
        return f"{sign}{_with_fraction(nanoseconds, 3)}µs"
    if nanoseconds < 1_000_000_000:
        return f"{sign}{_with_fraction(nanoseconds, 6)}ms"
    hours, rest = divmod(nanoseconds, 3600 * 10**9)
    minutes, rest = divmod(rest, 60 * 10**9)
    seconds = _with_fraction(rest, 9)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


# ------------------------------------------------------------ field helpers


def _mapping(data: Any, where: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigError(f"{where}: expected a mapping, got {type(data).__name__}")
    return data


def _scalar_text(value: Any, where: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"{where}: expected a string")


def _string(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else _scalar_text(value, key)


def _optional_string(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None else _scalar_text(value, key)


def _optional_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ConfigError(f"{key}: expected a boolean")
    return value


def _string_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{key}: expected a list")
    return [_scalar_text(item, key) for item in value]


def _list_of_mappings(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{key}: expected a list")
    return [_mapping(item, key) for item in value]


def _optional_duration(data: Mapping[str, Any], key: str) -> timedelta | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ConfigError(f"{key}: expected a duration")
    if isinstance(value, int):
        return timedelta(microseconds=value // 1000)
    if isinstance(value, str):
        return parse_duration(value)
    raise ConfigError(f"{key}: expected a duration")


def _coerce_kind(value: str, enum: type[Enum]) -> str:
    try:
        return enum(value)
    except ValueError:
        return value


def _raw(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _compact(items: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in items.items() if value not in (None, "", [], {})}


# ------------------------------------------------------------------- hooks


def _hook_from_dict(data: Mapping[str, Any]) -> Hook:
    execution = _mapping(data.get("execution"), "execution")
    return Hook(
        name=_string(data, "name"),
        type=_coerce_kind(_string(data, "type"), HookType),
        path=_optional_string(data, "path"),
        arguments=_string_list(data, "arguments"),
        interval=_optional_duration(execution, "interval"),
    )


def _hook_to_dict(hook: Hook) -> dict[str, Any]:
    execution = {"interval": format_duration(hook.interval)} if hook.interval is not None else None
    return _compact(
        {
            "name": hook.name,
            "type": _raw(hook.type),
            "path": hook.path,
            "arguments": list(hook.arguments),
            "execution": execution,
        }
    )


# ------------------------------------------------------------ current format


def _store_from_dict(data: Mapping[str, Any]) -> KubeconfigStore:
    return KubeconfigStore(
        kind=_coerce_kind(_string(data, "kind"), StoreKind),
        id=_optional_string(data, "id"),
        kubeconfig_name=_optional_string(data, "kubeconfigName"),
        paths=_string_list(data, "paths"),
        refresh_index_after=_optional_duration(data, "refreshIndexAfter"),
        required=_optional_bool(data, "required"),
        show_prefix=_optional_bool(data, "showPrefix"),
        config=copy.deepcopy(data.get("config")),
    )


def _store_to_dict(store: KubeconfigStore) -> dict[str, Any]:
    refresh = store.refresh_index_after
    return _compact(
        {
            "id": store.id,
            "kind": _raw(store.kind),
            "kubeconfigName": store.kubeconfig_name,
            "paths": list(store.paths),
            "refreshIndexAfter": format_duration(refresh) if refresh is not None else None,
            "required": store.required,
            "showPrefix": store.show_prefix,
            "config": copy.deepcopy(store.config),
        }
    )


def config_from_dict(data: Any) -> Config:
    """Build a Config from parsed YAML data."""
    data = _mapping(data, "config")
    return Config(
        kind=_string(data, "kind"),
        version=_string(data, "version"),
        kubeconfig_name=_optional_string(data, "kubeconfigName"),
        show_preview=_optional_bool(data, "showPreview"),
        refresh_index_after=_optional_duration(data, "refreshIndexAfter"),
        hooks=[_hook_from_dict(item) for item in _list_of_mappings(data, "hooks")],
        kubeconfig_stores=[
            _store_from_dict(item) for item in _list_of_mappings(data, "kubeconfigStores")
        ],
    )


def config_to_dict(config: Config) -> dict[str, Any]:
    """Render a Config as plain data ready for YAML."""
    refresh = config.refresh_index_after
    return _compact(
        {
            "kind": config.kind,
            "version": config.version,
            "kubeconfigName": config.kubeconfig_name,
            "showPreview": config.show_preview,
            "refreshIndexAfter": format_duration(refresh) if refresh is not None else None,
            "hooks": [_hook_to_dict(hook) for hook in config.hooks],
            "kubeconfigStores": [_store_to_dict(store) for store in config.kubeconfig_stores],
        }
    )


# ------------------------------------------------------------- legacy format


def old_config_from_dict(data: Any) -> ConfigOld:
    """Build a legacy ConfigOld from parsed YAML data."""
    data = _mapping(data, "config")
    return ConfigOld(
        kubeconfig_name=_string(data, "kubeconfigName"),
        kubeconfig_rediscovery_interval=_optional_duration(data, "kubeconfigRediscoveryInterval"),
        vault_api_address=_string(data, "vaultAPIAddress"),
        hooks=[_hook_from_dict(item) for item in _list_of_mappings(data, "hooks")],
        kubeconfig_paths=[
            KubeconfigPath(
                path=_string(item, "path"),
                store=_coerce_kind(_string(item, "store"), StoreKind),
            )
            for item in _list_of_mappings(data, "kubeconfigPaths")
        ],
    )


def old_config_to_dict(old: ConfigOld) -> dict[str, Any]:
    """Render a legacy ConfigOld as plain data ready for YAML."""
    interval = old.kubeconfig_rediscovery_interval
    return _compact(
        {
            "kubeconfigName": old.kubeconfig_name,
            "kubeconfigRediscoveryInterval": format_duration(interval) if interval is not None else None,
            "vaultAPIAddress": old.vault_api_address,
            "hooks": [_hook_to_dict(hook) for hook in old.hooks],
            "kubeconfigPaths": [
                {"path": item.path, "store": _raw(item.store)} for item in old.kubeconfig_paths
            ],
        }
    )


def convert_configuration(old: ConfigOld) -> Config:
    """Convert a legacy configuration into the current format."""
    config = Config(
        kind=CONFIG_KIND,
        version=CONFIG_VERSION,
        refresh_index_after=old.kubeconfig_rediscovery_interval,
        hooks=list(old.hooks),
    )
    if old.kubeconfig_name:
        config.kubeconfig_name = old.kubeconfig_name

    filesystem_store = KubeconfigStore(id="default", kind=StoreKind.FILESYSTEM)
    vault_store = KubeconfigStore(id="default", kind=StoreKind.VAULT)
    if old.vault_api_address:
        vault_store.config = {VAULT_API_ADDRESS_KEY: old.vault_api_address}

    for entry in old.kubeconfig_paths:
        if entry.store == StoreKind.FILESYSTEM:
            filesystem_store.paths.append(entry.path)
        elif entry.store == StoreKind.VAULT:
            vault_store.paths.append(entry.path)

    config.kubeconfig_stores.extend(
        store for store in (filesystem_store, vault_store) if store.paths
    )
    return config


def _dump(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def migrate_config(old: ConfigOld, filename: str | Path) -> Config:
    """Back up the legacy file as ``<filename>.old`` and rewrite it in the current format."""
    new = convert_configuration(old)
    try:
        Path(f"{filename}.old").write_text(_dump(old_config_to_dict(old)), encoding="utf-8")
        Path(filename).write_text(_dump(config_to_dict(new)), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to migrate SwitchConfig file: {exc}") from exc
    return new


def load_config_from_file(filepath: str | Path) -> Config | None:
    """Load the configuration file; return None when it does not exist.

    Files in the legacy format are migrated in place.
    """
    path = Path(filepath)
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return None
    if not content:
        return Config()
    text = content.decode("utf-8")

    config: Config | None
    try:
        config = config_from_dict(yaml.safe_load(text))
    except (yaml.YAMLError, ConfigError):
        config = None

    if config is None or (not config.version and not config.kubeconfig_stores):
        try:
            old = old_config_from_dict(yaml.safe_load(text))
        except (yaml.YAMLError, ConfigError) as exc:
            raise ConfigError(f"could not unmarshal config with path '{filepath}': {exc}") from exc
        return migrate_config(old, filepath)
    return config