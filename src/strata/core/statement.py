"""Forward-only result cursor returned by ``Database.query``."""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Iterable, Iterator
from typing import Any

from strata.core.protocols import Cursor

_TAG_PATTERN = re.compile(r"</?([A-Za-z][A-Za-z0-9]*)\b[^>]*>")
_ALLOWED_TAG_PATTERN = re.compile(r"<\s*([A-Za-z][A-Za-z0-9]*)\s*>")


def parse_allowed_tags(allowed_tags: str | Iterable[str]) -> frozenset[str]:
    """Normalize ``"<b><i>"`` or ``["b", "i"]`` into ``{"b", "i"}``."""
    if isinstance(allowed_tags, str):
        names = _ALLOWED_TAG_PATTERN.findall(allowed_tags)
        if not names and allowed_tags.strip():
            names = allowed_tags.replace(",", " ").split()
    else:
        names = [name.strip("<>/ ") for name in allowed_tags]
    return frozenset(name.lower() for name in names if name)


def strip_tags(value: str, allowed: frozenset[str] = frozenset()) -> str:
    """Remove every HTML tag from *value* except those named in *allowed*.

    Substitution repeats until nothing changes: removing ``<x>`` from
    ``<<x>script>`` must not leave a ``<script>`` behind.
    """

    def _replace(match: re.Match[str]) -> str:
        return match.group(0) if match.group(1).lower() in allowed else ""

    while True:
        stripped = _TAG_PATTERN.sub(_replace, value)
        if stripped == value:
            return stripped
        value = stripped


class DatabaseStatement:
    """
    Single-pass iterator over the rows of an executed query.

    Rows are returned as ``dict`` keyed by column name. ``next()`` returns
    ``None`` once the cursor is exhausted and keeps returning ``None``.
    ``count()`` reports the total number of rows of the result; it buffers
    the rows that were not read yet, so it is safe to call before or
    between ``next()`` calls.
    """

    def __init__(self, cursor: Cursor, *, allowed_tags: str | Iterable[str] | None = None):
        self._cursor = cursor
        self._columns = [column[0] for column in cursor.description or ()]
        self._buffer: deque[Any] | None = None
        self._consumed = 0
        self._exhausted = False
        self._allowed_tags: frozenset[str] | None = None
        if allowed_tags is not None:
            self.set_allowed_html_tags(allowed_tags)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def lastrowid(self) -> Any:
        return getattr(self._cursor, "lastrowid", None)

    def set_allowed_html_tags(self, allowed_tags: str | Iterable[str] | None) -> None:
        """Enable tag stripping on string fields (``None`` disables it).

        An empty allow-list strips every tag.
        """
        self._allowed_tags = None if allowed_tags is None else parse_allowed_tags(allowed_tags)

    def count(self) -> int:
        """Total number of rows in the result."""
        if self._buffer is None:
            remaining = [] if self._exhausted or not self._columns else self._cursor.fetchall()
            self._buffer = deque(remaining)
            self._exhausted = True
        return self._consumed + len(self._buffer)

    def next(self) -> dict[str, Any] | None:
        """Next row, or ``None`` when the result is exhausted."""
        raw = self._fetch()
        if raw is None:
            return None
        self._consumed += 1
        return self._to_row(raw)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        while (row := self.next()) is not None:
            yield row

    def close(self) -> None:
        self._cursor.close()

    def _fetch(self) -> Any:
        if self._buffer is not None:
            return self._buffer.popleft() if self._buffer else None
        if self._exhausted or not self._columns:
            return None
        raw = self._cursor.fetchone()
        if raw is None:
            self._exhausted = True
        return raw

    def _to_row(self, raw: Any) -> dict[str, Any]:
        if isinstance(raw, dict):
            row = dict(raw)
        else:
            row = dict(zip(self._columns, raw, strict=False))
        if self._allowed_tags is not None:
            for key, value in row.items():
                if isinstance(value, str):
                    row[key] = strip_tags(value, self._allowed_tags)
        return row


__all__ = [
    "DatabaseStatement",
    "parse_allowed_tags",
    "strip_tags",
]
