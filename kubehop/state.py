"""Hook state files recording when a hook last ran."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

_TIMESTAMP = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})"
    r"(?:\.(\d+))?\s*(Z|z|[+-]\d{2}(?::?\d{2})?)?$"
)


class StateError(Exception):
    """Raised when a hook state file cannot be parsed."""


@dataclass
class HookState:
    """The last execution of a hook."""

    hook_name: str = ""
    last_execution_time: datetime | None = None


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
        offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:4]) if len(digits) > 2 else 0)
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


def get_hook_state(hook_state_filepath: str | Path) -> HookState | None:
    """Load a hook state file; return None when it does not exist yet."""
    path = Path(hook_state_filepath)
    if not path.exists():
        logger.debug("State file not found under path: %r", str(path))
        return None

    text = path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise StateError(f"could not unmarshal hook state file with path '{path}': {exc}") from exc
    if data is None:
        return HookState()

    try:
        if not isinstance(data, Mapping):
            raise ValueError("expected a mapping")
        name = data.get("hookName")
        return HookState(
            hook_name="" if name is None else str(name),
            last_execution_time=_parse_time(data.get("lastExecutionTime")),
        )
    except ValueError as exc:
        raise StateError(f"could not unmarshal hook state file with path '{path}': {exc}") from exc


def update_hook_state(hook_name: str, state_file_name: str | Path) -> None:
    """Record that the hook ran now, replacing any previous state."""
    data = {
        "hookName": hook_name,
        "lastExecutionTime": _format_time(datetime.now(timezone.utc)),
    }
    Path(state_file_name).write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")