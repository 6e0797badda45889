"""Write report rows to data/reports/ as JSON for inspection."""
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

import orjson
from pydantic import BaseModel

from src.config import REPORTS_DIR

logger = logging.getLogger(__name__)


class ReportStorage:
    """Stores report lists as indented JSON files."""

    def __init__(self, reports_dir: Path = REPORTS_DIR):
        self.reports_dir = reports_dir
        self.reports_dir.mkdir(parents=True, exist_ok=True)

    def save_report(self, name: str, rows: Sequence[BaseModel]) -> Path:
        """Save one report; the file name carries the report name and a UTC stamp."""
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        path = self.reports_dir / f"{name}_{stamp}.json"
        payload = {
            "report": name,
            "generated_at": datetime.now(timezone.utc),
            "rows": [row.model_dump(mode="json") for row in rows],
        }
        with open(path, "wb") as f:
            f.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        logger.info(f"Saved {len(rows)} {name} rows to {path}")
        return path
