"""Search index: a cached context-name to kubeconfig-path mapping for one store."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml

from kubehop.config import Config

logger = logging.getLogger(__name__)

INDEX_STATE_FILE_NAME = "index.state"
INDEX_FILE_NAME = "index"

_TIMESTAMP = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?\s*(Z|z|[+-]\d{2}(?::?\d{2})?)?$"
)


class IndexFileError(Exception):
    """Raised when an index or index state file cannot be read or parsed."""


@dataclass
class Index:
    """The pre-computed context to kubeconfig path mapping of a store."""

    kind: str = ""
    context_to_path_mapping: dict[str, str] = field(default_factory=dict)


@dataclass
class IndexState:
    """When the index of a store kind was last refreshed."""

    kind: str = ""
    last_update_time: datetime | None = None


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _parse_time(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"expected a timestamp, got {type(value).__name__}")
    match = _TIMESTAMP.match(value.strip())
    if match is None:
        raise ValueError(f"invalid timestamp {value!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    tz = timezone.utc
    if zone and zone not in ("Z", "z"):
        digits = zone[1:].replace(":", "")
        hours = int(digits[:2])
        minutes = int(digits[2:4]) if len(digits) > 2 else 0
        offset = timedelta(hours=hours, minutes=minutes)
        tz = timezone(-offset if zone[0] == "-" else offset)
    parsed = datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), microsecond, tzinfo=tz
    )
    return parsed.astimezone(timezone.utc)


def _format_time(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    return text + "Z"


def _load_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


class SearchIndex:
    """Index files of one kubeconfig store inside the state directory."""

    def __init__(self, store_kind: str, state_directory: str | Path, store_id: str) -> None:
        directory = Path(state_directory)
        if not directory.exists():
            directory.mkdir(mode=0o755)

        self.kubeconfig_store_kind = _text(store_kind)
        self.index_filepath = directory / f"switch.{store_id}.{INDEX_FILE_NAME}"
        self.index_state_filepath = directory / f"switch.{store_id}.{INDEX_STATE_FILE_NAME}"
        self.content: Index | None = self._load_from_file()

    def _load_from_file(self) -> Index | None:
        path = self.index_filepath
        if not path.exists():
            return None
        try:
            data = _load_yaml(path)
        except OSError as exc:
            raise IndexFileError(f"failed to read index file from {str(path)!r}. File corrupt?: {exc}") from exc
        except yaml.YAMLError as exc:
            raise IndexFileError(f"could not unmarshal index file with path '{path}': {exc}") from exc
        if data is None:
            return Index()
        try:
            return self._index_from_data(data)
        except ValueError as exc:
            raise IndexFileError(f"could not unmarshal index file with path '{path}': {exc}") from exc

    @staticmethod
    def _index_from_data(data: Any) -> Index:
        if not isinstance(data, Mapping):
            raise ValueError("expected a mapping")
        mapping = data.get("contextToPathMapping") or {}
        if not isinstance(mapping, Mapping):
            raise ValueError("contextToPathMapping: expected a mapping")
        kind = data.get("kind")
        return Index(
            kind="" if kind is None else str(kind),
            context_to_path_mapping={str(key): str(value) for key, value in mapping.items()},
        )

    def has_content(self) -> bool:
        return self.content is not None

    def has_kind(self, kind: str) -> bool:
        return self.content is not None and self.content.kind == _text(kind)

    def get_content(self) -> dict[str, str] | None:
        if self.content is None:
            return None
        return self.content.context_to_path_mapping

    def should_be_used(
        self, config: Config | None, store_refresh_index_after: timedelta | None
    ) -> bool:
        """Tell whether the index is fresh enough to be used instead of a new search."""
        try:
            state = self._get_index_state()
        except (OSError, IndexFileError) as exc:
            raise IndexFileError(f"failed to get index state: {exc}") from exc

        if state is None or state.kind != self.kubeconfig_store_kind:
            return False

        refresh_after = None
        if config is not None and config.refresh_index_after is not None:
            refresh_after = config.refresh_index_after
        if store_refresh_index_after is not None:
            refresh_after = store_refresh_index_after
        if refresh_after is None or state.last_update_time is None:
            return False

        return datetime.now(timezone.utc) < state.last_update_time + refresh_after

    def write_state(self, state: IndexState) -> None:
        data: dict[str, Any] = {"kind": _text(state.kind)}
        if state.last_update_time is not None:
            data["lastUpdateTime"] = _format_time(state.last_update_time)
        self.index_state_filepath.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    def write(self, index: Index) -> None:
        data = {
            "kind": _text(index.kind),
            "contextToPathMapping": dict(index.context_to_path_mapping),
        }
        self.index_filepath.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    def delete(self) -> None:
        """Remove the index and its state file; nothing happens when no state file exists."""
        if not self.index_state_filepath.exists():
            return
        self.index_filepath.unlink()
        self.index_state_filepath.unlink()

    def _get_index_state(self) -> IndexState | None:
        path = self.index_state_filepath
        if not path.exists():
            logger.warning("SearchIndex state file not found under path: %r", str(path))
            return None
        try:
            data = _load_yaml(path)
        except yaml.YAMLError as exc:
            raise IndexFileError(f"could not unmarshal index state file with path '{path}': {exc}") from exc
        if data is None:
            return IndexState()
        try:
            if not isinstance(data, Mapping):
                raise ValueError("expected a mapping")
            kind = data.get("kind")
            return IndexState(
                kind="" if kind is None else str(kind),
                last_update_time=_parse_time(data.get("lastUpdateTime")),
            )
        except ValueError as exc:
            raise IndexFileError(f"could not unmarshal index state file with path '{path}': {exc}") from exc