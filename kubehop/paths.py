"""Resolution of kubeconfig paths given on the command line and in the environment."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Mapping

from kubehop.config import Config, KubeconfigStore, StoreKind

DEFAULT_KUBECONFIG_NAME = "config"
DEFAULT_KUBECONFIG_PATH = "$HOME/.kube/config"
ENV_AND_FLAG_STORE_ID = "env-and-flag"
KUBECONFIG_ENV = "KUBECONFIG"
KUBECONFIG_ENV_SEPARATOR = ":"
TEMPORARY_KUBECONFIG_SUFFIX = ".tmp"

_VARIABLE = re.compile(
    r"\$(?:"
    r"\{(?P<braced>[^}]*)\}"
    r"|(?P<special>[*#$@!?\-0-9])"
    r"|(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<unclosed>\{)"
    r")"
)


def _environ(environ: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def _expand_env(text: str, environ: Mapping[str, str]) -> str:
    """Replace ``$VAR`` and ``${VAR}`` with their values; unset variables become empty."""

    def replace(match: re.Match[str]) -> str:
        if match.group("unclosed") is not None:
            return ""
        name = match.group("braced")
        if name is None:
            name = match.group("special") or match.group("name")
        if not name:
            return ""
        return environ.get(name, "")

    return _VARIABLE.sub(replace, text)


def expand_path(path: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ``~`` to ``$HOME`` and then all environment variables in the path."""
    return _expand_env(path.replace("~", "$HOME"), _environ(environ))


def is_duplicate_path(stores: Iterable[KubeconfigStore], new_path: str) -> bool:
    """Tell whether any of the configured stores already holds the path."""
    return any(new_path in store.paths for store in stores)


def kubeconfig_path_from_flag(
    kubeconfig_path: str, environ: Mapping[str, str] | None = None
) -> str:
    """Resolve the ``--kubeconfig-path`` flag.

    The default location is only used when a kubeconfig file exists there;
    an empty string means no path.
    """
    if not kubeconfig_path:
        return ""
    env = _environ(environ)
    kubeconfig_path = kubeconfig_path.replace("~", "$HOME")
    if kubeconfig_path == DEFAULT_KUBECONFIG_PATH:
        default_path = _expand_env(DEFAULT_KUBECONFIG_PATH, env)
        try:
            Path(default_path).stat()
        except (OSError, ValueError):
            return ""
        return default_path
    return _expand_env(kubeconfig_path, env)


def _store_kind(value: str) -> str:
    try:
        return StoreKind(value)
    except ValueError:
        return value


def store_from_flag_and_env(
    config: Config,
    kubeconfig_path: str,
    kubeconfig_name: str = DEFAULT_KUBECONFIG_NAME,
    storage_backend: str = StoreKind.FILESYSTEM.value,
    environ: Mapping[str, str] | None = None,
) -> KubeconfigStore | None:
    """Turn the ``--kubeconfig-path`` flag and ``KUBECONFIG`` into one extra store.

    Returns None when neither contributes a path.
    """
    env = _environ(environ)
    paths: list[str] = []

    path_from_flag = kubeconfig_path_from_flag(kubeconfig_path, env)
    if path_from_flag:
        paths.append(path_from_flag)

    for path in env.get(KUBECONFIG_ENV, "").split(KUBECONFIG_ENV_SEPARATOR):
        if (
            path
            and not path.endswith(TEMPORARY_KUBECONFIG_SUFFIX)
            and not is_duplicate_path(config.kubeconfig_stores, path)
        ):
            paths.append(expand_path(path, env))

    if not paths:
        return None

    return KubeconfigStore(
        id=ENV_AND_FLAG_STORE_ID,
        kind=_store_kind(storage_backend),
        kubeconfig_name=kubeconfig_name,
        paths=paths,
        show_prefix=False,
    )