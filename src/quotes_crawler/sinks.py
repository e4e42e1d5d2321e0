# src/quotes_crawler/sinks.py
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from quotes_crawler.extractors.base import QuoteRecord

logger = logging.getLogger(__name__)


class RecordSink(Protocol):
    async def push_data(self, records: Sequence[QuoteRecord]) -> None:
        ...


class JsonlSink:
    """
    Appends records to a JSON Lines file, one write per batch.
    The file is never truncated, so repeated runs accumulate.
    """

    def __init__(self, path: str | os.PathLike) -> None:
        self.path = Path(path)

    async def push_data(self, records: Sequence[QuoteRecord]) -> None:
        if not records:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lines = "".join(json.dumps(r.to_dict(), ensure_ascii=False) + "\n" for r in records)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(lines)
        logger.debug("Wrote %d records to %s", len(records), self.path)


class MemorySink:
    """Keeps every batch in memory."""

    def __init__(self) -> None:
        self.batches: List[List[QuoteRecord]] = []

    @property
    def records(self) -> List[QuoteRecord]:
        return [r for batch in self.batches for r in batch]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [r.to_dict() for r in self.records]

    async def push_data(self, records: Sequence[QuoteRecord]) -> None:
        if records:
            self.batches.append(list(records))
