"""In-memory log ring buffer with a custom logging handler.

The buffer keeps the most recent ``capacity`` entries and serves filtered,
paginated, newest-first views to the admin log viewer. It is memory-only and
resets when the process restarts.
"""

import json
import logging
import math
import re
import threading
import traceback
from collections import deque
from datetime import datetime, timezone
from typing import Any, Mapping, NamedTuple, Optional, Union

from app.log_context import get_request_context

DEFAULT_BUFFER_SIZE = 1000
DEFAULT_MAX_MESSAGE_LENGTH = 10000

LOG_LEVELS = ("debug", "info", "warn", "error")

_LEVEL_ALIASES = {
    "debug": "debug",
    "info": "info",
    "warn": "warn",
    "warning": "warn",
    "error": "error",
    "critical": "error",
    "fatal": "error",
}

# Keys whose values are replaced before an entry is buffered
SENSITIVE_FIELDS = (
    "password",
    "token",
    "apikey",
    "secret",
    "creditcard",
    "ssn",
    "authorization",
)
REDACTED = "[REDACTED]"

_AUTO_ID_PATTERN = re.compile(r"^log_\d+$")


def normalize_level(level: Any) -> str:
    """Map a level name (including Python's WARNING/CRITICAL) onto debug/info/warn/error."""
    return _LEVEL_ALIASES.get(str(level or "").strip().lower(), "info")


def format_timestamp(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _coerce_timestamp(value: Any) -> datetime:
    ts = None
    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            ts = datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            ts = None
    elif isinstance(value, str):
        try:
            ts = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            ts = None

    if ts is None:
        return datetime.now(timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


CIRCULAR = "[Circular]"


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _to_json_safe(value: Any, _active: Optional[set] = None) -> Any:
    """Copy ``value`` into plain JSON types: str keys, lists, and scalars.

    Anything else becomes its ``str()``; a container already being copied
    higher up the same branch becomes ``[Circular]``.
    """
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if not isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return _safe_str(value)

    active = _active if _active is not None else set()
    if id(value) in active:
        return CIRCULAR
    active.add(id(value))
    try:
        if isinstance(value, Mapping):
            return {_safe_str(key): _to_json_safe(item, active) for key, item in value.items()}
        return [_to_json_safe(item, active) for item in value]
    finally:
        active.discard(id(value))


def _coerce_mapping(value: Any) -> Optional[dict]:
    if isinstance(value, Mapping):
        return _to_json_safe(value)
    return None


def _compact_json(value: Optional[dict]) -> str:
    return json.dumps(value or {}, separators=(",", ":"), ensure_ascii=False, default=str)


def sanitize(value: Any, _active: Optional[set] = None) -> Any:
    """Recursively replace values of sensitive keys with ``[REDACTED]``.

    Self-referencing containers are cut at the repeat with ``[Circular]``.
    """
    if not isinstance(value, (Mapping, list, tuple)):
        return value

    active = _active if _active is not None else set()
    if id(value) in active:
        return CIRCULAR
    active.add(id(value))
    try:
        if isinstance(value, Mapping):
            cleaned = {}
            for key, item in value.items():
                lower_key = _safe_str(key).lower()
                if any(field in lower_key for field in SENSITIVE_FIELDS):
                    cleaned[key] = REDACTED
                else:
                    cleaned[key] = sanitize(item, active)
            return cleaned
        return [sanitize(item, active) for item in value]
    finally:
        active.discard(id(value))


class LogEntry:
    __slots__ = ("seq", "id", "timestamp", "level", "message", "context", "meta", "error")

    def __init__(
        self,
        seq: int,
        id: str,
        timestamp: datetime,
        level: str,
        message: str,
        context: Optional[dict] = None,
        meta: Optional[dict] = None,
        error: Optional[dict] = None,
    ):
        self.seq = seq
        self.id = id
        self.timestamp = timestamp
        self.level = level
        self.message = message
        self.context = context
        self.meta = meta
        self.error = error

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match against message, context and meta.

        ``needle`` must already be lowercase.
        """
        return (
            needle in self.message.lower()
            or needle in _compact_json(self.context).lower()
            or needle in _compact_json(self.meta).lower()
        )

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "timestamp": format_timestamp(self.timestamp),
            "level": self.level,
            "message": self.message,
        }
        if self.context is not None:
            data["context"] = self.context
        if self.meta is not None:
            data["meta"] = self.meta
        if self.error is not None:
            data["error"] = self.error
        return data

    def __repr__(self) -> str:
        return f"LogEntry(id={self.id!r}, level={self.level!r}, message={self.message[:40]!r})"


class AutoId:
    """Take the next ``log_<n>`` id from the buffer's counter."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "AUTO_ID"


AUTO_ID = AutoId()


class ExplicitId(NamedTuple):
    """Use a caller-supplied id.

    Falls back to the auto id when ``value`` is already held by a buffered
    entry, looks like an auto id (``log_<n>``), or cannot be turned into a
    string.
    """

    value: str


EntryId = Union[AutoId, ExplicitId]


class LogPage(NamedTuple):
    entries: list
    total: int


class LogBuffer:
    """Capacity-bounded, insertion-ordered store of ``LogEntry`` values.

    All operations hold one lock, so readers never observe a buffer mid-eviction
    and ids stay unique when logging happens from worker threads.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_BUFFER_SIZE,
        max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
    ):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._max_message_length = max_message_length
        self._entries: deque[LogEntry] = deque()
        self._ids: set[str] = set()
        self._counter = 0
        self._dropped = 0
        self._lock = threading.Lock()

    def append(
        self,
        level: Any,
        message: Any,
        *,
        timestamp: Any = None,
        context: Any = None,
        meta: Any = None,
        error: Any = None,
        entry_id: EntryId = AUTO_ID,
    ) -> None:
        """Add an entry, evicting the oldest ones past capacity.

        Never raises: malformed optional fields are defaulted, and an entry
        that cannot be built at all is counted in ``dropped``.
        """
        try:
            fields = {
                "level": normalize_level(level),
                "message": (message if isinstance(message, str) else str(message))[: self._max_message_length],
                "timestamp": _coerce_timestamp(timestamp),
                "context": _coerce_mapping(context),
                "meta": _coerce_mapping(meta),
                "error": _coerce_mapping(error),
            }
        except Exception:
            fields = None

        candidate = None
        if isinstance(entry_id, ExplicitId):
            try:
                candidate = str(entry_id.value)
            except Exception:
                candidate = None
            if candidate and _AUTO_ID_PATTERN.match(candidate):
                candidate = None

        with self._lock:
            self._counter += 1
            if fields is None:
                self._dropped += 1
                return

            new_id = f"log_{self._counter}"
            if candidate and candidate not in self._ids:
                new_id = candidate

            self._entries.append(LogEntry(seq=self._counter, id=new_id, **fields))
            self._ids.add(new_id)

            while len(self._entries) > self._capacity:
                evicted = self._entries.popleft()
                self._ids.discard(evicted.id)

    def query(
        self,
        level: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 50,
    ) -> LogPage:
        """Return one newest-first page of the filtered entries plus the filtered total.

        A page below 1 is read as page 1; a limit below 1 gives an empty page.
        Pages past the end are empty, never an error.
        """
        with self._lock:
            entries = list(self._entries)

        if level:
            entries = [entry for entry in entries if entry.level == level]

        if search:
            needle = search.lower()
            entries = [entry for entry in entries if entry.matches(needle)]

        # Stable: equal timestamps keep insertion order
        entries.sort(key=lambda entry: entry.timestamp, reverse=True)
        total = len(entries)

        if limit < 1:
            return LogPage(entries=[], total=total)

        start = (max(page, 1) - 1) * limit
        return LogPage(entries=entries[start:start + limit], total=total)

    def clear(self) -> int:
        """Remove every entry and reset the id counter. Returns the number removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._ids.clear()
            self._counter = 0
            return count

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def capacity(self) -> int:
        return self._capacity

    def stats(self) -> dict:
        with self._lock:
            return {
                "size": len(self._entries),
                "capacity": self._capacity,
                "dropped": self._dropped,
            }

    def __len__(self) -> int:
        return self.size()


def _error_details(exc_info) -> Optional[dict]:
    if not exc_info or exc_info[1] is None:
        return None
    exc = exc_info[1]
    details = {
        "name": type(exc).__name__,
        "message": str(exc),
        "stack": "".join(traceback.format_exception(*exc_info)),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        details["code"] = str(code)
    return details


class InMemoryHandler(logging.Handler):
    """Logging handler that appends records to a ``LogBuffer``.

    Structured fields travel through ``extra``::

        logger.info("User logged in", extra={"context": {"userId": "u1"}})

    The current request context is merged underneath the record's own context.
    """

    def __init__(self, buffer: LogBuffer, level: int = logging.NOTSET):
        super().__init__(level)
        self.buffer = buffer

    def emit(self, record: logging.LogRecord) -> None:
        try:
            context = dict(get_request_context())
            record_context = getattr(record, "context", None)
            if isinstance(record_context, Mapping):
                context.update(record_context)
            meta = getattr(record, "meta", None)

            self.buffer.append(
                record.levelname,
                record.getMessage(),
                timestamp=record.created,
                context=sanitize(context) if context else None,
                meta=sanitize(meta) if isinstance(meta, Mapping) else None,
                error=_error_details(record.exc_info),
            )
        except Exception:
            self.handleError(record)
