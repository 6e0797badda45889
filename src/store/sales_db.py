"""SQLite store for items and guild sales."""
import logging
from pathlib import Path
from typing import Optional

import aiosqlite
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import SALES_DB, config
from src.errors import SaleImportError
from src.parse.models import (
    Guild,
    GuildItemSummary,
    ImportResult,
    ItemSummary,
    SaleRecord,
    StoredSale,
)
from src.store.content_hash import compute_content_hash

logger = logging.getLogger(__name__)

_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS items (
        item_id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_link TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL DEFAULT ''
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS item_sales (
        sale_id INTEGER PRIMARY KEY AUTOINCREMENT,
        item_id INTEGER NOT NULL REFERENCES items(item_id),
        guild_id INTEGER NOT NULL,
        guild_name TEXT NOT NULL,
        seller TEXT NOT NULL,
        buyer TEXT NOT NULL,
        quantity INTEGER NOT NULL,
        price INTEGER NOT NULL,
        sale_timestamp INTEGER NOT NULL,
        duplicate_index INTEGER NOT NULL DEFAULT 1,
        content_hash INTEGER NOT NULL UNIQUE
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_item_sales_item_id ON item_sales(item_id)",
    "CREATE INDEX IF NOT EXISTS idx_item_sales_guild_id ON item_sales(guild_id)",
    "CREATE INDEX IF NOT EXISTS idx_item_sales_seller ON item_sales(seller)",
    "CREATE INDEX IF NOT EXISTS idx_item_sales_buyer ON item_sales(buyer)",
    "CREATE INDEX IF NOT EXISTS idx_item_sales_timestamp ON item_sales(sale_timestamp)",
]

_SALE_COLUMNS = """
    s.sale_id, s.item_id, i.item_link, s.guild_id, s.guild_name,
    s.seller, s.buyer, s.quantity, s.price, s.sale_timestamp, s.duplicate_index
"""

_ITEM_SUMMARY_SELECT = """
    SELECT
        i.item_id,
        i.item_link,
        i.name,
        COUNT(s.sale_id),
        COALESCE(SUM(s.quantity), 0),
        COALESCE(SUM(s.price), 0),
        CASE
            WHEN SUM(s.quantity) > 0 THEN CAST(SUM(s.price) / CAST(SUM(s.quantity) AS REAL) AS INTEGER)
            ELSE 0
        END,
        CAST(COALESCE(MIN(s.price / CAST(s.quantity AS REAL)), 0) AS INTEGER),
        CAST(COALESCE(MAX(s.price / CAST(s.quantity AS REAL)), 0) AS INTEGER)
    FROM items i
    INNER JOIN item_sales s ON i.item_id = s.item_id
"""

_ITEM_SUMMARY_ORDERS = {
    "value": "6 DESC",
    "recent": "MAX(s.sale_timestamp) DESC",
}


def _row_to_sale(row) -> StoredSale:
    return StoredSale(
        sale_id=row[0],
        item_id=row[1],
        item_link=row[2],
        guild_id=row[3],
        guild_name=row[4],
        seller=row[5],
        buyer=row[6],
        quantity=row[7],
        price=row[8],
        sale_timestamp=row[9],
        duplicate_index=row[10],
    )


def _row_to_item_summary(row) -> ItemSummary:
    return ItemSummary(
        item_id=row[0],
        item_link=row[1],
        name=row[2],
        total_sales_count=row[3],
        total_quantity_sold=row[4],
        total_value_sold=row[5],
        average_price=row[6],
        min_price=row[7],
        max_price=row[8],
    )


class SalesDB:
    """SQLite database of items and the sales imported from guild dumps."""

    def __init__(self, db_path: Path = SALES_DB):
        self.db_path = Path(db_path)

    @staticmethod
    async def _configure(db: aiosqlite.Connection) -> None:
        await db.execute("PRAGMA foreign_keys = ON")
        await db.execute("PRAGMA synchronous = NORMAL")

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("PRAGMA journal_mode = WAL")
            for statement in _SCHEMA:
                await db.execute(statement)
            await db.commit()
        logger.info(f"Sales database initialized at {self.db_path}")

    @staticmethod
    async def _resolve_item(db: aiosqlite.Connection, item_link: str) -> int:
        cursor = await db.execute("SELECT item_id FROM items WHERE item_link = ?", (item_link,))
        row = await cursor.fetchone()
        if row:
            return row[0]
        cursor = await db.execute(
            "INSERT INTO items (item_link, name) VALUES (?, '')", (item_link,)
        )
        return cursor.lastrowid

    async def get_or_create_item(self, item_link: str) -> int:
        """Return the item id for a link, creating the item if needed."""
        async with aiosqlite.connect(self.db_path) as db:
            await self._configure(db)
            item_id = await self._resolve_item(db, item_link)
            await db.commit()
            return item_id

    async def import_sales(self, records: list[SaleRecord], source: Optional[str] = None) -> ImportResult:
        """
        Insert sales whose content hash is not stored yet, all in one transaction.
        Sales already present are skipped; any other failure rolls the batch back.
        """
        try:
            inserted, skipped = await self._import_batch(records)
        except (aiosqlite.Error, OverflowError, ValueError) as e:
            # OverflowError: a field too large for a 64-bit INTEGER column
            logger.error(f"Import of {len(records)} sales rolled back: {e}")
            raise SaleImportError(f"Error importing sales: {e}") from e

        guild_ids = {record.guild_id for record in records}
        logger.info(f"Imported {inserted} new sales, skipped {skipped} duplicates")
        return ImportResult(
            source=source,
            guilds=len(guild_ids),
            parsed=len(records),
            inserted=inserted,
            skipped=skipped,
        )

    @retry(
        stop=stop_after_attempt(config.IMPORT_MAX_RETRIES),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        retry=retry_if_exception_type(aiosqlite.OperationalError),
        reraise=True,
    )
    async def _import_batch(self, records: list[SaleRecord]) -> tuple[int, int]:
        """One attempt at the import transaction. Returns (inserted, skipped)."""
        inserted = 0
        skipped = 0
        item_ids: dict[str, int] = {}

        async with aiosqlite.connect(self.db_path) as db:
            await self._configure(db)
            try:
                for record in records:
                    item_id = item_ids.get(record.item_link)
                    if item_id is None:
                        item_id = await self._resolve_item(db, record.item_link)
                        item_ids[record.item_link] = item_id

                    cursor = await db.execute(
                        """
                        INSERT INTO item_sales (
                            item_id, guild_id, guild_name, seller, buyer,
                            quantity, price, sale_timestamp, duplicate_index, content_hash
                        )
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                        ON CONFLICT(content_hash) DO NOTHING
                        """,
                        (
                            item_id,
                            record.guild_id,
                            record.guild_name,
                            record.seller,
                            record.buyer,
                            record.quantity,
                            record.price,
                            record.sale_timestamp,
                            record.duplicate_index,
                            compute_content_hash(record, item_id),
                        ),
                    )
                    if cursor.rowcount == 1:
                        inserted += 1
                    else:
                        skipped += 1
                await db.commit()
            except BaseException:
                await db.rollback()
                raise

        return inserted, skipped

    async def list_guilds(self) -> list[Guild]:
        """Distinct (guild_id, guild_name) pairs seen in stored sales."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT DISTINCT guild_id, guild_name FROM item_sales ORDER BY guild_name"
            )
            return [Guild(guild_id=row[0], guild_name=row[1]) for row in await cursor.fetchall()]

    async def get_item_name(self, item_id: int) -> Optional[str]:
        """Display name of an item, or None if the item doesn't exist."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT name FROM items WHERE item_id = ?", (item_id,))
            row = await cursor.fetchone()
            return row[0] if row else None

    async def update_item_name(self, item_id: int, name: str) -> bool:
        """Set an item's display name. Returns False if the item doesn't exist."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "UPDATE items SET name = ? WHERE item_id = ?", (name or "", item_id)
            )
            await db.commit()
            return cursor.rowcount > 0

    async def load_item_names(self) -> dict[int, str]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT item_id, name FROM items")
            return {row[0]: row[1] or "" for row in await cursor.fetchall()}

    async def count_items(self) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM items")
            row = await cursor.fetchone()
            return row[0]

    async def count_sales(self) -> int:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM item_sales")
            row = await cursor.fetchone()
            return row[0]

    async def load_all_sales(self) -> list[StoredSale]:
        """All stored sales, newest first."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT {_SALE_COLUMNS}
                FROM item_sales s
                INNER JOIN items i ON s.item_id = i.item_id
                ORDER BY s.sale_timestamp DESC
                """
            )
            return [_row_to_sale(row) for row in await cursor.fetchall()]

    async def load_sales_for_item(self, item_id: int) -> list[StoredSale]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT {_SALE_COLUMNS}
                FROM item_sales s
                INNER JOIN items i ON s.item_id = i.item_id
                WHERE s.item_id = ?
                ORDER BY s.sale_timestamp DESC
                """,
                (item_id,),
            )
            return [_row_to_sale(row) for row in await cursor.fetchall()]

    async def load_sales_for_item_in_guild(self, item_id: int, guild_id: int) -> list[StoredSale]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                f"""
                SELECT {_SALE_COLUMNS}
                FROM item_sales s
                INNER JOIN items i ON s.item_id = i.item_id
                WHERE s.item_id = ? AND s.guild_id = ?
                ORDER BY s.sale_timestamp DESC
                """,
                (item_id, guild_id),
            )
            return [_row_to_sale(row) for row in await cursor.fetchall()]

    async def load_item_summaries(
        self, guild_id: Optional[int] = None, order: str = "value"
    ) -> list[ItemSummary]:
        """
        Per-item totals, optionally limited to one guild.
        order="value" puts the highest value first; order="recent" puts the item
        with the latest sale first.
        """
        if order not in _ITEM_SUMMARY_ORDERS:
            raise ValueError(f"Unknown item summary order: {order!r}")

        query = _ITEM_SUMMARY_SELECT
        params: tuple = ()
        if guild_id is not None:
            query += " WHERE s.guild_id = ?"
            params = (guild_id,)
        query += f" GROUP BY i.item_id, i.item_link, i.name ORDER BY {_ITEM_SUMMARY_ORDERS[order]}"

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            return [_row_to_item_summary(row) for row in await cursor.fetchall()]

    async def load_guild_item_summaries(self) -> list[GuildItemSummary]:
        """Per guild/item totals with internal sale counts filled in."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT
                    i.item_id,
                    i.item_link,
                    i.name,
                    s.guild_id,
                    s.guild_name,
                    COALESCE(SUM(s.price), 0),
                    COUNT(s.sale_id),
                    COALESCE(SUM(s.quantity), 0)
                FROM items i
                INNER JOIN item_sales s ON i.item_id = s.item_id
                GROUP BY i.item_id, i.item_link, i.name, s.guild_id, s.guild_name
                ORDER BY s.guild_name, i.item_link
                """
            )
            summaries = [
                GuildItemSummary(
                    item_id=row[0],
                    item_link=row[1],
                    name=row[2],
                    guild_id=row[3],
                    guild_name=row[4],
                    total_value_sold=row[5],
                    total_sales_count=row[6],
                    total_quantity_sold=row[7],
                )
                for row in await cursor.fetchall()
            ]

        internal_counts = await self.calculate_internal_counts(summaries)
        for summary in summaries:
            summary.internal_count = internal_counts[(summary.item_id, summary.guild_id)]
        return summaries

    async def get_sellers_in_guild(self, guild_id: int) -> set[str]:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT DISTINCT seller FROM item_sales WHERE guild_id = ?", (guild_id,)
            )
            return {row[0] for row in await cursor.fetchall()}

    async def calculate_internal_counts(
        self, summaries: list[GuildItemSummary]
    ) -> dict[tuple[int, int], int]:
        """
        Count sales per (item_id, guild_id) whose buyer also sells in that guild.
        Every pair in summaries gets an entry, 0 when there are no such sales.
        """
        counts = {(s.item_id, s.guild_id): 0 for s in summaries}
        if not counts:
            return counts

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT s.item_id, s.guild_id, COUNT(DISTINCT s.sale_id)
                FROM item_sales s
                WHERE s.buyer IN (
                    SELECT DISTINCT t.seller FROM item_sales t WHERE t.guild_id = s.guild_id
                )
                GROUP BY s.item_id, s.guild_id
                """
            )
            for item_id, guild_id, count in await cursor.fetchall():
                if (item_id, guild_id) in counts:
                    counts[(item_id, guild_id)] = count
        return counts
