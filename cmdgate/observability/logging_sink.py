"""JSONL sink for gate audit events."""

from __future__ import annotations

import asyncio
import json
from collections import deque
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from cmdgate.core.types import DiagnosticEvent
from cmdgate.observability.redaction import redact_payload


class JsonlLoggingSink:
    """Append-only JSONL audit log with size-based rotation."""

    def __init__(
        self,
        path: Path,
        rotate_bytes: int = 5 * 1024 * 1024,
        max_backups: int = 3,
    ) -> None:
        self.path = path
        self.rotate_bytes = rotate_bytes
        self.max_backups = max(0, max_backups)
        self._lock = asyncio.Lock()

    async def emit(self, event: DiagnosticEvent | dict[str, Any]) -> None:
        """Append a redacted event to the log."""
        payload = event.to_dict() if isinstance(event, DiagnosticEvent) else dict(event)
        line = json.dumps(redact_payload(payload), ensure_ascii=False)

        async with self._lock:
            await asyncio.to_thread(self._append_line_sync, line)

    def _append_line_sync(self, line: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        encoded = (line + "\n").encode("utf-8")
        if self.path.exists() and self.path.stat().st_size + len(encoded) > self.rotate_bytes:
            self._rotate_sync()
        with self.path.open("ab") as handle:
            handle.write(encoded)

    def _backup(self, index: int) -> Path:
        return self.path.with_suffix(f"{self.path.suffix}.{index}")

    def _rotate_sync(self) -> None:
        if self.max_backups <= 0:
            self.path.unlink(missing_ok=True)
            return

        self._backup(self.max_backups).unlink(missing_ok=True)
        for index in range(self.max_backups - 1, 0, -1):
            src = self._backup(index)
            if src.exists():
                src.replace(self._backup(index + 1))

        if self.path.exists():
            self.path.replace(self._backup(1))

    def _iter_log_files(self) -> list[Path]:
        # Oldest backup first so rows come out in write order.
        files = [self._backup(i) for i in range(self.max_backups, 0, -1) if self._backup(i).exists()]
        if self.path.exists():
            files.append(self.path)
        return files

    @staticmethod
    def _matches(event: dict[str, Any], *, program: str | None, status: str | None) -> bool:
        if program and event.get("program") != program:
            return False
        if status and event.get("status") != status:
            return False
        return True

    @staticmethod
    def _decode_line(raw: str) -> dict[str, Any] | None:
        line = raw.strip()
        if not line:
            return None
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            return None
        return payload if isinstance(payload, dict) else None

    def _iter_matching(
        self, *, program: str | None, status: str | None
    ) -> Iterator[dict[str, Any]]:
        for path in self._iter_log_files():
            with path.open(encoding="utf-8") as handle:
                for raw in handle:
                    event = self._decode_line(raw)
                    if event and self._matches(event, program=program, status=status):
                        yield event

    def count(self, *, program: str | None = None, status: str | None = None) -> int:
        """Number of events matching the filters across all log files."""
        return sum(1 for _ in self._iter_matching(program=program, status=status))

    def query(
        self,
        *,
        program: str | None = None,
        status: str | None = None,
        limit: int = 100,
        page: int = 1,
    ) -> list[dict[str, Any]]:
        """Return one page of matching events, oldest first.

        Page 1 holds the latest ``limit`` events, page 2 the ones before them.
        """
        if limit <= 0 or page < 1:
            return []

        skip = (page - 1) * limit
        window: deque[dict[str, Any]] = deque(maxlen=skip + limit)
        window.extend(self._iter_matching(program=program, status=status))
        rows = list(window)
        return rows[: max(0, len(rows) - skip)]
