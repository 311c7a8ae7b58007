"""In-memory menu catalog cache used for code lookup."""

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from hotel_billing.engine.records import MenuRecord

logger = logging.getLogger(__name__)


def normalize_code(raw_code) -> str:
    """Trim and uppercase an operator-entered item code."""
    return str(raw_code or "").strip().upper()


class MenuCatalog:
    """
    Ordered view of the menu, indexed by id, alpha code and numeric code.

    Loaded once from storage and updated incrementally when an item is
    created, instead of re-fetching the whole menu after every write.
    """

    def __init__(self, records: Iterable[MenuRecord] = ()):
        self._records: List[MenuRecord] = []
        self._by_id: Dict[int, MenuRecord] = {}
        self._by_alpha: Dict[str, MenuRecord] = {}
        self._by_numeric: Dict[str, MenuRecord] = {}
        self.load(records)

    def load(self, records: Iterable[MenuRecord]) -> None:
        """Replace the cache contents."""
        self._records = []
        self._by_id.clear()
        self._by_alpha.clear()
        self._by_numeric.clear()
        for record in sorted(records, key=lambda r: r.id):
            self._index(record)
        logger.debug(f"Menu catalog loaded with {len(self._records)} items")

    def add(self, record: MenuRecord) -> None:
        """Add a newly created record without reloading."""
        if record.id in self._by_id:
            self._records = [r for r in self._records if r.id != record.id]
        self._index(record)
        self._records.sort(key=lambda r: r.id)

    def _index(self, record: MenuRecord) -> None:
        self._records.append(record)
        self._by_id[record.id] = record
        # First record wins on collisions, matching id-ordered lookup
        self._by_alpha.setdefault(normalize_code(record.alpha_code), record)
        self._by_numeric.setdefault(str(record.numeric_code).strip(), record)

    def get(self, menu_id: int) -> Optional[MenuRecord]:
        return self._by_id.get(menu_id)

    def find_by_code(self, raw_code) -> Optional[MenuRecord]:
        """
        Look up a record by alpha code (case-insensitive) or numeric code.

        Numeric codes are compared verbatim against the normalized input,
        they contain no letters so uppercasing never changes them.
        """
        code = normalize_code(raw_code)
        if not code:
            return None
        alpha = self._by_alpha.get(code)
        numeric = self._by_numeric.get(code)
        if alpha and numeric:
            return alpha if alpha.id <= numeric.id else numeric
        return alpha or numeric

    def __iter__(self) -> Iterator[MenuRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)
