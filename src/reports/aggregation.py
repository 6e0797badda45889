"""Guild-week and guild-item-week sales reports."""
import logging
from datetime import datetime
from typing import Optional

from src.parse.models import GuildItemWeekAggregate, GuildWeekAggregate, StoredSale
from src.reports.weeks import TradingWeekCalculator, utc_now

logger = logging.getLogger(__name__)


def calculate_guild_sales_by_week(
    sales: list[StoredSale],
    now: Optional[datetime] = None,
    calculator: Optional[TradingWeekCalculator] = None,
) -> list[GuildWeekAggregate]:
    """
    Sum the raw sale price per (guild, trading week).
    Sorted newest week first, then by guild name. Week bounds are aware
    datetimes in the calculator's time zone.
    """
    calculator = calculator or TradingWeekCalculator()
    anchor = calculator.anchor_before(utc_now(now))
    anchor_ts = int(anchor.timestamp())

    result: dict[tuple[int, int], GuildWeekAggregate] = {}
    for sale in sales:
        week = calculator.week_number_from_anchor(sale.sale_timestamp, anchor_ts)
        key = (sale.guild_id, week)
        aggregate = result.get(key)
        if aggregate is None:
            week_start, week_end = calculator.week_bounds_from_anchor(week, anchor)
            # same instants, shown in the boundary's zone so labels match it
            aggregate = GuildWeekAggregate(
                guild_id=sale.guild_id,
                guild_name=sale.guild_name,
                week_number=week,
                week_start=week_start.astimezone(calculator.tz),
                week_end=week_end.astimezone(calculator.tz),
            )
            result[key] = aggregate
        aggregate.total_sales += sale.price

    ordered = sorted(result.values(), key=lambda g: g.guild_name)
    ordered.sort(key=lambda g: g.week_start, reverse=True)
    logger.debug(f"Built {len(ordered)} guild-week rows from {len(sales)} sales")
    return ordered


def calculate_guild_item_sales_by_week(
    sales: list[StoredSale],
    item_names: Optional[dict[int, str]] = None,
    now: Optional[datetime] = None,
    calculator: Optional[TradingWeekCalculator] = None,
) -> list[GuildItemWeekAggregate]:
    """
    Sum price x quantity, sale count and quantity per (guild, item, trading week).
    Sorted by guild name, then item link.
    """
    calculator = calculator or TradingWeekCalculator()
    item_names = item_names or {}
    anchor_ts = calculator.anchor_timestamp(utc_now(now))

    result: dict[tuple[int, int, int], GuildItemWeekAggregate] = {}
    for sale in sales:
        week = calculator.week_number_from_anchor(sale.sale_timestamp, anchor_ts)
        key = (sale.guild_id, sale.item_id, week)
        aggregate = result.get(key)
        if aggregate is None:
            aggregate = GuildItemWeekAggregate(
                guild_id=sale.guild_id,
                guild_name=sale.guild_name,
                item_id=sale.item_id,
                item_link=sale.item_link,
                item_name=item_names.get(sale.item_id, ""),
                week_number=week,
            )
            result[key] = aggregate
        aggregate.total_sales += sale.total_value
        aggregate.sales_count += 1
        aggregate.total_quantity_sold += sale.quantity

    return sorted(result.values(), key=lambda g: (g.guild_name, g.item_link))
