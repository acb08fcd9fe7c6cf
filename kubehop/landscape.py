"""Building blocks of the Gardener landscape sync hook: store and naming helpers."""

from __future__ import annotations

import os
import posixpath
import shutil
from pathlib import Path
from typing import Mapping

from kubehop.config import StoreKind
from kubehop.index import SearchIndex

KUBECONFIG_STORE_FILESYSTEM = "filesystem"
KUBECONFIG_STORE_VAULT = "vault"

GARDEN_NAMESPACE = "garden"
ANNOTATION_SHOOT_USE_AS_SEED = "shoot.gardener.cloud/use-as-seed"
SHOOTED_SEEDS_DIRECTORY = "shooted-seeds"


class FileStore:
    """Writes kubeconfigs of a landscape to the local filesystem."""

    def get_kind(self) -> StoreKind:
        return StoreKind.FILESYSTEM

    def create_landscape_directory(self, landscape_directory: str | Path) -> None:
        """Create the root directory of the landscape; an existing one is fine."""
        try:
            os.mkdir(landscape_directory, 0o700)
        except FileExistsError:
            return
        except OSError as exc:
            raise OSError(
                exc.errno,
                f"failed to create filesystem directory for kubeconfigs "
                f"{str(landscape_directory)!r}: {exc}",
            ) from exc

    def write_kubeconfig_file(
        self, directory: str | Path, kubeconfig_name: str, kubeconfig: bytes | str
    ) -> Path:
        """Write the kubeconfig as ``<directory>/<kubeconfig_name>`` and return its path."""
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as exc:
            raise OSError(
                exc.errno, f"failed to create directory {str(directory)!r}: {exc}"
            ) from exc
        target = Path(f"{directory}/{kubeconfig_name}")
        data = kubeconfig.encode("utf-8") if isinstance(kubeconfig, str) else bytes(kubeconfig)
        target.write_bytes(data)
        return target

    def clean_existing_kubeconfigs(self, directory: str | Path) -> None:
        """Remove the directory and everything below it; a missing one is fine."""
        path = Path(directory)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()


def get_previous_identifiers(search_index: SearchIndex, landscape: str) -> tuple[set[str], set[str]]:
    """Return the shoot and shooted-seed identifiers recorded in the search index."""
    shoot_identifiers: set[str] = set()
    seed_identifiers: set[str] = set()

    content = search_index.get_content()
    if not search_index.has_content() or not content:
        return shoot_identifiers, seed_identifiers

    for kubeconfig_filepath in content.values():
        parent_directory = posixpath.dirname(kubeconfig_filepath.rstrip("/")) or "."
        name = posixpath.basename(kubeconfig_filepath.rstrip("/")) or "/"
        # directories are created with a uniform prefix
        if f"{landscape}-shoot-" in kubeconfig_filepath:
            shoot_identifiers.add(name)
        # shooted seeds always live in a "shooted-seeds" sub-directory
        if SHOOTED_SEEDS_DIRECTORY in parent_directory and f"{landscape}-seed-" in name:
            seed_identifiers.add(name)
    return shoot_identifiers, seed_identifiers


def is_shooted_seed(namespace: str, annotations: Mapping[str, str] | None) -> bool:
    """Tell whether a shoot in the given namespace with these annotations is used as a seed."""
    if namespace == GARDEN_NAMESPACE and annotations is not None:
        return ANNOTATION_SHOOT_USE_AS_SEED in annotations
    return False


def secret_identifier(namespace: str, shoot_name: str) -> str:
    return f"{namespace}/{shoot_name}"


def shoot_identifier(landscape: str, project: str, shoot: str) -> str:
    """``<landscape>-shoot-<project-name>-<shoot-name>``"""
    return f"{landscape}-shoot-{project}-{shoot}"


def shoot_kubeconfig_directory(
    root_directory: str, landscape: str, seed_name: str, identifier: str
) -> str:
    """``<root>/<landscape>/shoots/seed-<seed>/<identifier>``"""
    return f"{root_directory}/{landscape}/shoots/seed-{seed_name}/{identifier}"


def seed_identifier(landscape: str, shoot: str) -> str:
    """``<landscape>-seed-<seed-name>``"""
    return f"{landscape}-seed-{shoot}"


def seed_kubeconfig_directory(root_directory: str, landscape: str, identifier: str) -> str:
    """``<root>/<landscape>/shooted-seeds/<identifier>``"""
    return f"{root_directory}/{landscape}/{SHOOTED_SEEDS_DIRECTORY}/{identifier}"