"""Import job: parse a dump and store its sales."""
import asyncio
import logging
from pathlib import Path
from typing import Optional

from src.config import config
from src.jobs.metrics import ImportMetrics
from src.parse.dump_parser import parse_dump_file, parse_dump_text
from src.parse.models import ImportResult, SaleRecord
from src.store.repository import SaleRepository

logger = logging.getLogger(__name__)


class ImportRunner:
    """Runs parse and import for one dump at a time."""

    def __init__(self, db: SaleRepository, anchor: str = config.DUMP_ANCHOR):
        self.db = db
        self.anchor = anchor

    async def run(self, path: Path | str) -> ImportResult:
        """Import a dump file. Raises DumpReadError or SaleImportError."""
        metrics = ImportMetrics(source=str(path))
        records = await parse_dump_file(path, self.anchor)
        metrics.mark_phase("parse")
        return await self._store(records, metrics, source=str(path))

    async def run_text(self, content: str, source: Optional[str] = None) -> ImportResult:
        """Import dump text that is already in memory."""
        metrics = ImportMetrics(source=source or "")
        loop = asyncio.get_running_loop()
        records = await loop.run_in_executor(None, parse_dump_text, content, self.anchor)
        metrics.mark_phase("parse")
        return await self._store(records, metrics, source=source)

    async def _store(
        self, records: list[SaleRecord], metrics: ImportMetrics, source: Optional[str]
    ) -> ImportResult:
        metrics.increment("parsed", len(records))
        metrics.increment("guilds", len({r.guild_id for r in records}))
        if not records:
            logger.warning(f"No sales found in {source or 'dump text'}")
            metrics.report()
            return ImportResult(source=source)

        result = await self.db.import_sales(records, source=source)
        metrics.mark_phase("store")
        metrics.increment("inserted", result.inserted)
        metrics.increment("skipped", result.skipped)
        metrics.report()
        return result
