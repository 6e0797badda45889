"""Capabilities the import and report paths need from a sales store."""
from typing import Optional, Protocol

from src.parse.models import Guild, ImportResult, SaleRecord, StoredSale


class SaleRepository(Protocol):
    """Store that resolves items and inserts sales by content hash."""

    async def initialize(self) -> None: ...

    async def get_or_create_item(self, item_link: str) -> int: ...

    async def import_sales(
        self, records: list[SaleRecord], source: Optional[str] = None
    ) -> ImportResult:
        """Insert every record whose content hash is absent, in one transaction."""
        ...

    async def list_guilds(self) -> list[Guild]: ...

    async def get_item_name(self, item_id: int) -> Optional[str]: ...

    async def update_item_name(self, item_id: int, name: str) -> bool: ...

    async def load_item_names(self) -> dict[int, str]: ...

    async def load_all_sales(self) -> list[StoredSale]: ...

    async def count_items(self) -> int: ...

    async def count_sales(self) -> int: ...
