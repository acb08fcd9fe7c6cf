"""Validation of the switch configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from kubehop.config import (
    VALID_CONFIG_VERSIONS,
    VALID_HOOK_TYPES,
    VALID_STORE_KINDS,
    Config,
    Hook,
    HookType,
    StoreKind,
)


class ErrorType(str, Enum):
    """Categories of field errors."""

    INVALID = "FieldValueInvalid"
    REQUIRED = "FieldValueRequired"
    FORBIDDEN = "FieldValueForbidden"

    def __str__(self) -> str:
        return self.value


_LABELS = {
    ErrorType.INVALID: "Invalid value",
    ErrorType.REQUIRED: "Required value",
    ErrorType.FORBIDDEN: "Forbidden",
}


@dataclass(frozen=True)
class FieldError:
    """A problem with one field of the configuration."""

    type: ErrorType
    field: str
    bad_value: Any = None
    detail: str = ""

    def __str__(self) -> str:
        if self.type is ErrorType.INVALID:
            return f"{self.field}: {_LABELS[self.type]}: {self.bad_value!r}: {self.detail}"
        return f"{self.field}: {_LABELS[self.type]}: {self.detail}"


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _landscape_name(store_config: Any) -> str | None:
    if isinstance(store_config, Mapping):
        name = store_config.get("landscapeName")
        if isinstance(name, str):
            return name
    return None


def validate_config(config: Config) -> list[FieldError]:
    """Return every error found in the configuration; empty when it is valid."""
    errors: list[FieldError] = []
    seen_keys: set[str] = set()
    uses_index = config.refresh_index_after is not None

    if config.version not in VALID_CONFIG_VERSIONS:
        errors.append(
            FieldError(
                ErrorType.INVALID,
                "version",
                config.version,
                f"Config version {config.version!r} is unknown. "
                f"Valid versions are {sorted(VALID_CONFIG_VERSIONS)}",
            )
        )

    for i, store in enumerate(config.kubeconfig_stores):
        store_id = store.id if store.id is not None else ""
        store_uses_index = uses_index or store.refresh_index_after is not None
        prefix = f"kubeconfigStores[{i}]"
        kind = _text(store.kind)

        if kind not in VALID_STORE_KINDS:
            errors.append(
                FieldError(
                    ErrorType.INVALID,
                    f"{prefix}.kind",
                    kind,
                    f"kind {kind!r} of kubeconfig store is unknown. "
                    f"Valid kinds are {sorted(VALID_STORE_KINDS)}",
                )
            )

        if not store.paths and kind in (StoreKind.FILESYSTEM.value, StoreKind.VAULT.value):
            errors.append(
                FieldError(
                    ErrorType.INVALID,
                    f"{prefix}.paths",
                    "",
                    "Must provide at least one path for the kubeconfig store.",
                )
            )

        # the Gardener landscape name is the default ID of the store
        if kind == StoreKind.GARDENER.value and store.id is None:
            landscape = _landscape_name(store.config)
            if landscape:
                store_id = landscape

        key = f"{kind}:{store_id}"
        if store_uses_index and key in seen_keys:
            errors.append(
                FieldError(
                    ErrorType.INVALID,
                    f"{prefix}.id",
                    store_id,
                    f"there are multiple kubeconfig stores with the same Kind {kind!r} configured. "
                    "In the switch configuration file, please set a unique ID for the kubeconfig store",
                )
            )
        seen_keys.add(key)

    if config.hooks:
        errors.extend(_validate_hooks("hooks", config.hooks))

    return errors


def _validate_hooks(path: str, hooks: list[Hook]) -> list[FieldError]:
    errors: list[FieldError] = []
    for i, hook in enumerate(hooks):
        prefix = f"{path}[{i}]"
        hook_type = _text(hook.type)
        if hook_type not in VALID_HOOK_TYPES:
            errors.append(
                FieldError(
                    ErrorType.INVALID,
                    f"{prefix}.type",
                    hook_type,
                    f"Unknown hook type. Valid hook types are {sorted(VALID_HOOK_TYPES)}",
                )
            )
        if hook_type == HookType.EXECUTABLE.value and hook.path is None:
            errors.append(
                FieldError(
                    ErrorType.REQUIRED,
                    f"{prefix}.path",
                    detail="Path to the hook executable has to be provided",
                )
            )
        if hook_type == HookType.INLINE_COMMAND.value and not hook.arguments:
            errors.append(
                FieldError(
                    ErrorType.REQUIRED,
                    f"{prefix}.arguments",
                    detail="arguments have to be provided for a hook with an inline command",
                )
            )
    return errors