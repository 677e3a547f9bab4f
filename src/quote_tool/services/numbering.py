"""
Document numbering - per-kind, per-year sequence counters.

Counters live in a small JSON file keyed ``"{kind}-{year}"`` holding the
last issued sequence. Each call increments and persists before the number
is handed back, so a number is never issued twice; a failure after the
write leaves a permanent gap.
"""
import json
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional


logger = logging.getLogger(__name__)

PREFIXES = {
    "Quote": "LVQ",
    "Invoice": "LVI",
}


def format_number(kind: str, year: int, seq: int) -> str:
    """Format ``LVQ-2026-0007`` style numbers. Anything but Invoice is a quote."""
    prefix = PREFIXES.get(kind, PREFIXES["Quote"])
    return f"{prefix}-{year}-{seq:04d}"


class DocumentNumberer:
    """Issues sequential human-readable document numbers."""

    def __init__(self, counters_path: Path, clock: Optional[Callable[[], datetime]] = None):
        self.counters_path = Path(counters_path)
        self.clock = clock or datetime.now
        self._lock = threading.Lock()

    def _read_counters(self) -> dict[str, int]:
        if not self.counters_path.exists():
            return {}
        with open(self.counters_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return {str(k): int(v) for k, v in data.items()} if isinstance(data, dict) else {}

    def _write_counters(self, counters: dict[str, int]):
        self.counters_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.counters_path.with_suffix('.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(counters, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.counters_path)

    def next_number(self, kind: str = "Quote", year: Optional[int] = None) -> str:
        """Increment and persist the counter for ``kind`` in ``year``, then format it."""
        year = year or self.clock().year
        key = f"{kind}-{year}"
        with self._lock:
            counters = self._read_counters()
            counters[key] = counters.get(key, 0) + 1
            self._write_counters(counters)
            seq = counters[key]
        number = format_number(kind, year, seq)
        logger.info("Issued %s number %s", kind, number)
        return number

    def peek(self, kind: str = "Quote", year: Optional[int] = None) -> int:
        """Last issued sequence for ``kind`` in ``year`` (0 if none yet)."""
        year = year or self.clock().year
        with self._lock:
            return self._read_counters().get(f"{kind}-{year}", 0)
