"""Metrics collection and seed management."""

import hashlib
import time
from typing import Dict, Any


class SeedManager:
    """
    Derives deterministic per-component seeds from one run seed.

    Global numpy/torch generators are left untouched; components seed their
    own generators from get_component_seed.
    """

    def __init__(self, global_seed: int = 0):
        self.global_seed = int(global_seed)
        self.component_seeds: Dict[str, int] = {}

    def get_component_seed(self, component: str) -> int:
        """Get deterministic seed for a specific component."""
        if component not in self.component_seeds:
            seed_str = f"{self.global_seed}_{component}"
            hash_obj = hashlib.md5(seed_str.encode())
            seed = int(hash_obj.hexdigest()[:8], 16) % (2**31)
            self.component_seeds[component] = seed
        return self.component_seeds[component]


class MetricsCollector:
    """Counters and accumulated timers for the frame loop."""

    def __init__(self):
        self.counters: Dict[str, int] = {}
        self.timers: Dict[str, float] = {}
        self.timer_counts: Dict[str, int] = {}
        self.start_times: Dict[str, float] = {}

    def increment_counter(self, name: str, delta: int = 1):
        self.counters[name] = self.counters.get(name, 0) + delta

    def start_timer(self, name: str):
        self.start_times[name] = time.perf_counter()

    def stop_timer(self, name: str) -> float:
        """Stop a timer and add its duration to the running total."""
        if name not in self.start_times:
            return 0.0
        duration = time.perf_counter() - self.start_times.pop(name)
        self.timers[name] = self.timers.get(name, 0.0) + duration
        self.timer_counts[name] = self.timer_counts.get(name, 0) + 1
        return duration

    def mean_time(self, name: str) -> float:
        n = self.timer_counts.get(name, 0)
        return self.timers[name] / n if n else 0.0

    def reset(self):
        self.counters.clear()
        self.timers.clear()
        self.timer_counts.clear()
        self.start_times.clear()

    def summary_stats(self) -> Dict[str, Any]:
        return {
            "frames": self.counters.get("frames", 0),
            "failed_frames": self.counters.get("failed_frames", 0),
            "mean_update_ms": 1e3 * self.mean_time("update"),
            "mean_draw_ms": 1e3 * self.mean_time("draw"),
        }
