"""Development trace log — one JSON object per line.

Each record gets a ``serverTs`` (ISO-8601, UTC) stamped on append.  Reads
return only the tail of the file so a long session does not ship the
whole log back to a debugging page.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

MAX_READ_BYTES = 256 * 1024


class TraceSink:
    """Append-only JSON-lines file with a bounded tail reader."""

    def __init__(self, path: Path | str, max_read_bytes: int = MAX_READ_BYTES) -> None:
        self.path = Path(path)
        self.max_read_bytes = max_read_bytes
        self._lock = threading.Lock()

    def append(self, record: dict[str, Any]) -> dict[str, Any]:
        entry = {"serverTs": datetime.now(timezone.utc).isoformat(), **record}
        line = json.dumps(entry, default=_jsonable) + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)
        return entry

    def read_tail(self) -> str:
        if not self.path.exists():
            return ""
        with self._lock:
            size = self.path.stat().st_size
            with self.path.open("rb") as f:
                if size > self.max_read_bytes:
                    f.seek(size - self.max_read_bytes)
                data = f.read()
        return data.decode("utf-8", errors="ignore")

    def read_records(self) -> list[dict[str, Any]]:
        """Parse the tail, skipping a first line cut in half by the byte limit."""
        records = []
        for line in self.read_tail().splitlines():
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                continue
        return records


def _jsonable(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
