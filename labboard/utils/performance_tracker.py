# =============================================================================
# File: performance_tracker.py
# Date: 2026-10-19
# Copyright (c) 2024 Goutam Malakar. All rights reserved.
# =============================================================================

import time
from collections import defaultdict, deque
from contextlib import contextmanager
from typing import Any, Dict, Optional

from labboard.logger import get_logger

logger = get_logger("performance_tracker")


class PerformanceTracker:
    """Track timings of run loads and collection loads."""

    def __init__(self, max_samples: int = 1000):
        self.max_samples = max_samples
        self.metrics: Dict[str, deque] = defaultdict(lambda: deque(maxlen=max_samples))
        self.counters: Dict[str, int] = defaultdict(int)

    @contextmanager
    def track(self, operation: str):
        """Context manager to track operation timing."""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            duration = time.perf_counter() - start_time
            self.metrics[operation].append(duration)
            self.counters[operation] += 1

    def get_stats(self, operation: str) -> Optional[Dict[str, Any]]:
        """Get performance statistics for an operation."""
        if operation not in self.metrics or not self.metrics[operation]:
            return None

        times = list(self.metrics[operation])
        return {
            "count": len(times),
            "avg_ms": sum(times) * 1000 / len(times),
            "min_ms": min(times) * 1000,
            "max_ms": max(times) * 1000,
            "last_ms": times[-1] * 1000,
            "total_calls": self.counters[operation],
        }

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        all_stats = {}
        for operation in list(self.metrics):
            stats = self.get_stats(operation)
            if stats:
                all_stats[operation] = stats
        return all_stats

    def reset(self) -> None:
        self.metrics.clear()
        self.counters.clear()


# Global performance tracker
perf_tracker = PerformanceTracker()
