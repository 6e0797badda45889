"""Turn a saved-variables dump into a flat list of sale records."""
import asyncio
import logging
from pathlib import Path

import aiofiles

from src.config import config
from src.errors import DumpReadError
from src.parse.dedupe import DuplicateIndexer
from src.parse.guilds import extract_guild_entries
from src.parse.models import SaleRecord
from src.parse.sales import extract_sales

logger = logging.getLogger(__name__)


def parse_dump_text(content: str, anchor: str = config.DUMP_ANCHOR) -> list[SaleRecord]:
    """
    Parse dump text into sale records tagged with their guild.
    Duplicate indexes restart at 1 on every call.
    """
    indexer = DuplicateIndexer()
    records: list[SaleRecord] = []

    guilds = extract_guild_entries(content, anchor)
    for guild in guilds:
        guild_sales = extract_sales(guild.sales_span)
        for sale in guild_sales:
            sale.guild_id = guild.guild_id
            sale.guild_name = guild.guild_name
        records.extend(indexer.assign_all(guild_sales))
        logger.debug(f"Guild {guild.guild_id} ({guild.guild_name}): {len(guild_sales)} sales")

    logger.info(f"Parsed {len(records)} sales from {len(guilds)} guilds")
    return records


async def read_dump_file(path: Path | str) -> str:
    """Read a dump file; any I/O failure is fatal to the parse."""
    try:
        async with aiofiles.open(path, "r", encoding="utf-8", errors="replace") as f:
            return await f.read()
    except OSError as e:
        raise DumpReadError(f"Error reading dump file {path}: {e}") from e


async def parse_dump_file(path: Path | str, anchor: str = config.DUMP_ANCHOR) -> list[SaleRecord]:
    """Read and parse a dump file, running the parse in the default executor."""
    content = await read_dump_file(path)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, parse_dump_text, content, anchor)
