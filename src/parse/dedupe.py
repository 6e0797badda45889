"""Occurrence numbering for identical sales within one parse call."""
from collections import defaultdict

from src.parse.models import SaleRecord


class DuplicateIndexer:
    """
    Counts sales by (timestamp, seller, buyer, quantity, price, item link).

    Create one per parse call; the counts must never outlive it.
    """

    def __init__(self):
        self.counters: dict[tuple, int] = defaultdict(int)

    def assign(self, record: SaleRecord) -> int:
        """Set record.duplicate_index to its 1-based occurrence and return it."""
        key = record.duplicate_key()
        self.counters[key] += 1
        record.duplicate_index = self.counters[key]
        return record.duplicate_index

    def assign_all(self, records: list[SaleRecord]) -> list[SaleRecord]:
        for record in records:
            self.assign(record)
        return records
