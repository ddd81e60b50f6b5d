"""Sales document store.

A thin ORM-like wrapper over a JSON document collection on disk. Each sale
is one JSON object inside a top-level list, keyed by an integer ``id``.
The store gives no guarantees beyond what the filesystem provides.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from colmado_core.config import StorePaths
from colmado_core.exceptions import StoreError
from colmado_core.sales.records import SaleRecord

logger = logging.getLogger(__name__)


def _numeric_id(value: object) -> Optional[int]:
    """Integer form of a document id, or None for missing/non-numeric ids."""
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring non-numeric sale id %r when assigning ids", value)
        return None


class SalesStore:
    """Sales collection backed by a JSON file.

    Example:
        >>> store = SalesStore.from_paths(StorePaths.from_root("data"))
        >>> store.add(sale)
        >>> sales = store.all()
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @classmethod
    def from_paths(cls, paths: StorePaths) -> SalesStore:
        """Open the sales collection under a data root."""
        return cls(paths.sales_collection)

    # --------------------------------------------------------------------- #
    # Raw document access
    # --------------------------------------------------------------------- #

    def _read_documents(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "[]")
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read sales collection {self.path}: {e}") from e
        if not isinstance(data, list):
            raise StoreError(f"Sales collection {self.path} must contain a JSON list")
        return data

    def _write_documents(self, documents: list[dict]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(documents, indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise StoreError(f"Cannot write sales collection {self.path}: {e}") from e
        logger.debug("Wrote %d sale documents to %s", len(documents), self.path)

    # --------------------------------------------------------------------- #
    # Queries
    # --------------------------------------------------------------------- #

    def all(self) -> list[SaleRecord]:
        """Return every sale in the collection.

        Raises:
            StoreError: If the collection file is unreadable or malformed.
        """
        return [SaleRecord.from_dict(doc) for doc in self._read_documents()]

    def count(self) -> int:
        """Number of sales in the collection."""
        return len(self._read_documents())

    def get(self, sale_id: int) -> Optional[SaleRecord]:
        """Return the sale with the given id, or None."""
        for doc in self._read_documents():
            if doc.get("id") == sale_id:
                return SaleRecord.from_dict(doc)
        return None

    def between(self, start: datetime, end: datetime) -> list[SaleRecord]:
        """Sales with start <= date < end."""
        return [s for s in self.all() if start <= s.date < end]

    def recent(self, minutes: int = 60, now: Optional[datetime] = None) -> list[SaleRecord]:
        """Sales from the last ``minutes`` minutes."""
        now = now or datetime.now()
        cutoff = now - timedelta(minutes=minutes)
        return [s for s in self.all() if s.date >= cutoff]

    def today(self, now: Optional[datetime] = None) -> list[SaleRecord]:
        """Sales since local midnight."""
        now = now or datetime.now()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return [s for s in self.all() if s.date >= midnight]

    # --------------------------------------------------------------------- #
    # Writes
    # --------------------------------------------------------------------- #

    def add(self, sale: SaleRecord) -> int:
        """Insert a sale, assigning the next integer id. Returns the id."""
        return self.bulk_add([sale])[0]

    def bulk_add(self, sales: Iterable[SaleRecord]) -> list[int]:
        """Insert many sales in one write. Returns the assigned ids."""
        documents = self._read_documents()
        numeric_ids = [i for i in (_numeric_id(d.get("id")) for d in documents) if i is not None]
        next_id = max(numeric_ids, default=0) + 1

        ids = []
        for sale in sales:
            sale.id = next_id
            documents.append(sale.to_dict())
            ids.append(next_id)
            next_id += 1

        self._write_documents(documents)
        logger.info("Added %d sale(s) to %s", len(ids), self.path)
        return ids

    def clear(self) -> None:
        """Remove every sale from the collection."""
        self._write_documents([])


SalesSource = Union[SalesStore, Sequence[SaleRecord], None]


def load_sales(source: SalesSource) -> list[SaleRecord]:
    """Materialize a sales source into a list of records.

    Args:
        source: A SalesStore, a sequence of SaleRecord, or None when no store
            is available.

    Returns:
        List of sales. Empty when source is None.

    Raises:
        StoreError: If the store cannot be read.
    """
    if source is None:
        return []
    if isinstance(source, SalesStore):
        return source.all()
    return list(source)
