"""FastAPI main application."""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import APIKeyHeader
from pydantic import BaseModel

from src.config import config
from src.errors import DumpReadError, SaleImportError
from src.jobs.importer import ImportRunner
from src.parse.models import (
    Guild,
    GuildItemSummary,
    GuildItemWeekAggregate,
    GuildWeekAggregate,
    ImportResult,
    ItemSummary,
    StoredSale,
)
from src.reports.builder import guild_item_week_report, guild_week_report
from src.store.sales_db import SalesDB

logger = logging.getLogger(__name__)

app = FastAPI(title="Guild Sales API", version="0.1.0")

# API Key security (if configured)
API_KEY_HEADER = APIKeyHeader(name="X-API-KEY", auto_error=False)


def verify_api_key(api_key: str = Depends(API_KEY_HEADER)) -> bool:
    """Verify API key if configured."""
    expected_key = config.API_KEY
    if expected_key:
        if not api_key or api_key != expected_key:
            raise HTTPException(status_code=403, detail="Invalid API key")
    return True


# Initialize components
sales_db = SalesDB()


@app.on_event("startup")
async def startup():
    """Initialize on startup."""
    await sales_db.initialize()


class ImportRequest(BaseModel):
    """Either a path readable by the server or the dump text itself."""
    path: Optional[str] = None
    text: Optional[str] = None


class ItemNameUpdate(BaseModel):
    name: str


class ItemName(BaseModel):
    item_id: int
    name: str


class Stats(BaseModel):
    total_items: int
    total_sales: int


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/stats", response_model=Stats)
async def stats(_: bool = Depends(verify_api_key)):
    return Stats(
        total_items=await sales_db.count_items(),
        total_sales=await sales_db.count_sales(),
    )


def resolve_import_path(raw_path: str) -> Path:
    """Resolve a requested dump path, which must lie inside API_IMPORT_DIR."""
    if not config.API_IMPORT_DIR:
        raise HTTPException(
            status_code=403, detail="Path imports are disabled; set API_IMPORT_DIR or send 'text'"
        )
    base = Path(config.API_IMPORT_DIR).resolve()
    path = (base / raw_path).resolve()
    if not path.is_relative_to(base):
        raise HTTPException(status_code=403, detail="Path is outside API_IMPORT_DIR")
    return path


@app.post("/import", response_model=ImportResult)
async def import_dump(request: ImportRequest, _: bool = Depends(verify_api_key)):
    """Import a dump. Sales already stored are skipped."""
    if bool(request.path) == bool(request.text):
        raise HTTPException(status_code=422, detail="Provide exactly one of 'path' or 'text'")

    runner = ImportRunner(sales_db)
    try:
        if request.path:
            return await runner.run(resolve_import_path(request.path))
        return await runner.run_text(request.text, source="api")
    except DumpReadError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SaleImportError as e:
        logger.error(f"Import failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/guilds", response_model=list[Guild])
async def guilds(_: bool = Depends(verify_api_key)):
    return await sales_db.list_guilds()


@app.get("/items", response_model=list[ItemSummary])
async def items(
    guild_id: Optional[int] = None,
    order: Literal["value", "recent"] = "value",
    _: bool = Depends(verify_api_key),
):
    return await sales_db.load_item_summaries(guild_id, order=order)


@app.get("/items/{item_id}/sales", response_model=list[StoredSale])
async def item_sales(
    item_id: int, guild_id: Optional[int] = None, _: bool = Depends(verify_api_key)
):
    if guild_id is not None:
        return await sales_db.load_sales_for_item_in_guild(item_id, guild_id)
    return await sales_db.load_sales_for_item(item_id)


@app.get("/items/{item_id}/name", response_model=ItemName)
async def get_item_name(item_id: int, _: bool = Depends(verify_api_key)):
    name = await sales_db.get_item_name(item_id)
    if name is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemName(item_id=item_id, name=name)


@app.put("/items/{item_id}/name", response_model=ItemName)
async def set_item_name(
    item_id: int, update: ItemNameUpdate, _: bool = Depends(verify_api_key)
):
    if not await sales_db.update_item_name(item_id, update.name):
        raise HTTPException(status_code=404, detail="Item not found")
    return ItemName(item_id=item_id, name=update.name)


@app.get("/reports/guild-weeks", response_model=list[GuildWeekAggregate])
async def guild_weeks(_: bool = Depends(verify_api_key)):
    return await guild_week_report(sales_db)


@app.get("/reports/guild-item-weeks", response_model=list[GuildItemWeekAggregate])
async def guild_item_weeks(guild_id: Optional[int] = None, _: bool = Depends(verify_api_key)):
    return await guild_item_week_report(sales_db, guild_id=guild_id)


@app.get("/reports/guild-items", response_model=list[GuildItemSummary])
async def guild_items(_: bool = Depends(verify_api_key)):
    return await sales_db.load_guild_item_summaries()
