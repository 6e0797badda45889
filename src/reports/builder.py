"""Load stored sales and build the weekly reports."""
from datetime import datetime
from typing import Optional

from src.parse.models import GuildItemWeekAggregate, GuildWeekAggregate
from src.reports.aggregation import (
    calculate_guild_item_sales_by_week,
    calculate_guild_sales_by_week,
)
from src.reports.weeks import TradingWeekCalculator
from src.store.repository import SaleRepository


async def guild_week_report(
    db: SaleRepository,
    now: Optional[datetime] = None,
    calculator: Optional[TradingWeekCalculator] = None,
) -> list[GuildWeekAggregate]:
    sales = await db.load_all_sales()
    return calculate_guild_sales_by_week(sales, now=now, calculator=calculator)


async def guild_item_week_report(
    db: SaleRepository,
    guild_id: Optional[int] = None,
    now: Optional[datetime] = None,
    calculator: Optional[TradingWeekCalculator] = None,
) -> list[GuildItemWeekAggregate]:
    """Guild-item-week rows, optionally limited to one guild."""
    sales = await db.load_all_sales()
    if guild_id is not None:
        sales = [s for s in sales if s.guild_id == guild_id]
    item_names = await db.load_item_names()
    return calculate_guild_item_sales_by_week(
        sales, item_names, now=now, calculator=calculator
    )
