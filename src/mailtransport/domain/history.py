"""Error records and the bounded history a transport keeps of them."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

#: Number of records a transport retains unless configured otherwise.
DEFAULT_MAX_ERRORS = 100


@dataclass(frozen=True, slots=True)
class ErrorRecord:
    """One failure observed while sending a message.

    Attributes:
        code: Provider error code, HTTP status, or a generic code (500).
        message: Human readable description.
        details: Raw decoded provider payload or string, when available.

    Example:
        >>> record = ErrorRecord(400, "Brevo API error (code: 400): bad sender")
        >>> record.code
        400
        >>> record.details is None
        True
    """

    code: int
    message: str
    details: Any = None


class ErrorHistory:
    """Caller-controlled history of :class:`ErrorRecord` objects.

    Works as a ring buffer: once ``max_errors`` records are held, appending
    drops the oldest one. ``max_errors=None`` keeps every record. The most
    recent record is tracked separately so it survives even when the buffer
    capacity is zero.

    Example:
        >>> history = ErrorHistory(max_errors=2)
        >>> for code in (1, 2, 3):
        ...     history.append(ErrorRecord(code, f"error {code}"))
        >>> [record.code for record in history]
        [2, 3]
        >>> history.last.code
        3
        >>> history.clear()
        >>> len(history), history.last
        (0, None)
    """

    def __init__(self, max_errors: int | None = DEFAULT_MAX_ERRORS) -> None:
        if max_errors is not None and max_errors < 0:
            raise ValueError(f"max_errors must be >= 0 or None, got {max_errors}")
        self._records: deque[ErrorRecord] = deque(maxlen=max_errors)
        self._last: ErrorRecord | None = None

    @property
    def max_errors(self) -> int | None:
        return self._records.maxlen

    @property
    def last(self) -> ErrorRecord | None:
        """Most recently appended record, or None after :meth:`clear`."""
        return self._last

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)
        self._last = record

    def clear(self) -> None:
        self._records.clear()
        self._last = None

    def to_list(self) -> list[ErrorRecord]:
        """Return a snapshot, oldest first."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(list(self._records))


__all__ = [
    "DEFAULT_MAX_ERRORS",
    "ErrorHistory",
    "ErrorRecord",
]
