"""Data models for parsed and stored guild sales."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, computed_field


@dataclass
class GuildEntry:
    """One guild table isolated from a dump; discarded after its sales are read."""

    guild_id: int
    guild_name: str
    sales_span: str


class SaleRecord(BaseModel):
    """Single guild store sale recovered from a dump."""

    item_link: str = ""
    seller: str = ""
    buyer: str = ""
    quantity: int = 0
    price: int = 0
    sale_timestamp: int = Field(default=0, description="Epoch seconds")
    duplicate_index: int = Field(default=1, ge=1, description="Occurrence within one parse call")
    guild_id: int = 0
    guild_name: str = ""

    @property
    def total_value(self) -> int:
        return self.price * self.quantity

    def duplicate_key(self) -> tuple[int, str, str, int, int, str]:
        """Key under which identical sales share one occurrence counter."""
        return (
            self.sale_timestamp,
            self.seller,
            self.buyer,
            self.quantity,
            self.price,
            self.item_link,
        )


class StoredSale(SaleRecord):
    """Sale row read back from the store, with its resolved item id."""

    sale_id: int
    item_id: int


class ItemSummary(BaseModel):
    """Per-item totals across all stored sales."""

    item_id: int
    item_link: str
    name: str = ""
    total_sales_count: int = 0
    total_quantity_sold: int = 0
    total_value_sold: int = 0
    average_price: int = 0
    min_price: int = 0
    max_price: int = 0


class GuildItemSummary(BaseModel):
    """Per guild/item totals, with trader fee shares."""

    item_id: int
    item_link: str
    name: str = ""
    guild_id: int
    guild_name: str
    total_value_sold: int = 0
    total_sales_count: int = 0
    total_quantity_sold: int = 0
    internal_count: int = 0

    @computed_field
    @property
    def fee_3_5_percent(self) -> int:
        return int(self.total_value_sold * 0.035)

    @computed_field
    @property
    def fee_1_percent(self) -> int:
        return int(self.total_value_sold * 0.01)


class Guild(BaseModel):
    guild_id: int
    guild_name: str


class GuildWeekAggregate(BaseModel):
    """Total sales of one guild in one trading week."""

    guild_id: int
    guild_name: str
    week_number: int
    week_start: datetime
    week_end: datetime
    total_sales: int = 0

    @computed_field
    @property
    def week_display(self) -> str:
        return f"Week {self.week_start:%d.%m.%y} - {self.week_end:%d.%m.%y}"


class GuildItemWeekAggregate(BaseModel):
    """Totals of one item sold through one guild in one trading week."""

    guild_id: int
    guild_name: str
    item_id: int
    item_link: str
    item_name: str = ""
    week_number: int
    total_sales: int = 0
    sales_count: int = 0
    total_quantity_sold: int = 0


class ImportResult(BaseModel):
    """Outcome of importing one dump."""

    source: Optional[str] = None
    guilds: int = 0
    parsed: int = 0
    inserted: int = 0
    skipped: int = 0
