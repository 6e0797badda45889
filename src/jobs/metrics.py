"""Counters and timing for one import run."""
import time
import logging
from collections import defaultdict
from typing import Dict

logger = logging.getLogger(__name__)


class ImportMetrics:
    """Track import counters and throughput."""

    def __init__(self, source: str = ""):
        self.source = source
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)
        self.phase_times: Dict[str, float] = {}
        self._phase_start = self.start_time

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] += amount

    def mark_phase(self, name: str) -> None:
        """Record how long the phase ending now took."""
        now = time.time()
        self.phase_times[name] = now - self._phase_start
        self._phase_start = now

    def get_rate(self) -> float:
        """Parsed sales per second since start."""
        elapsed = time.time() - self.start_time
        if elapsed > 0:
            return self.counters.get("parsed", 0) / elapsed
        return 0.0

    def report(self) -> None:
        """Log current metrics."""
        phases = ", ".join(f"{name}={seconds:.2f}s" for name, seconds in self.phase_times.items())
        logger.info(
            f"Import {self.source or '<text>'} | "
            f"Guilds: {self.counters.get('guilds', 0)} | "
            f"Parsed: {self.counters.get('parsed', 0)} | "
            f"Inserted: {self.counters.get('inserted', 0)} | "
            f"Skipped: {self.counters.get('skipped', 0)} | "
            f"Rate: {self.get_rate():.0f}/s"
            + (f" | {phases}" if phases else "")
        )
