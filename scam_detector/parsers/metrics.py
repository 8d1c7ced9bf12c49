"""Analysis pipeline metrics: per-source outcomes, latency, fallback rate.

Counters accumulate for the process lifetime and are read by the health
endpoint. Guarded by a lock since readers run alongside analyses.
"""

import time
from dataclasses import dataclass
from threading import Lock

SOURCE_OUTCOMES = ("ok", "empty", "timeout", "error")


@dataclass
class SourceMetrics:
    """Outcome counts for one upstream source."""

    ok: int = 0
    empty: int = 0  # answered, but nothing usable (None or stub)
    timeout: int = 0
    error: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0

    @property
    def calls(self) -> int:
        return self.ok + self.empty + self.timeout + self.error

    @property
    def avg_latency_ms(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.total_latency_ms / self.calls

    @property
    def success_pct(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.ok / self.calls * 100


class AnalysisMetrics:
    def __init__(self) -> None:
        self._lock = Lock()
        self._sources: dict[str, SourceMetrics] = {}
        self._total_analyses: int = 0
        self._fallback_analyses: int = 0
        self._remote_analyses: int = 0
        self._failed_analyses: int = 0
        self._total_latency_ms: float = 0.0
        self._start_time: float = time.monotonic()

    def _get_source(self, source: str) -> SourceMetrics:
        if source not in self._sources:
            self._sources[source] = SourceMetrics()
        return self._sources[source]

    def record_source(self, source: str, outcome: str, latency_ms: float) -> None:
        """Record one upstream call outcome (``ok``/``empty``/``timeout``/``error``)."""
        if outcome not in SOURCE_OUTCOMES:
            raise ValueError(f"Unknown source outcome: {outcome}")
        with self._lock:
            sm = self._get_source(source)
            setattr(sm, outcome, getattr(sm, outcome) + 1)
            sm.total_latency_ms += latency_ms
            if latency_ms > sm.max_latency_ms:
                sm.max_latency_ms = latency_ms

    def record_analysis(
        self,
        latency_ms: float,
        *,
        used_fallback: bool = False,
        remote: bool = False,
        failed: bool = False,
    ) -> None:
        """Record a completed analysis request."""
        with self._lock:
            self._total_analyses += 1
            self._total_latency_ms += latency_ms
            if used_fallback:
                self._fallback_analyses += 1
            if remote:
                self._remote_analyses += 1
            if failed:
                self._failed_analyses += 1

    def get_summary(self) -> dict:
        """Return a snapshot of all metrics."""
        with self._lock:
            uptime = time.monotonic() - self._start_time
            total = self._total_analyses
            summary: dict = {
                "uptime_sec": round(uptime),
                "total_analyses": total,
                "fallback_analyses": self._fallback_analyses,
                "remote_analyses": self._remote_analyses,
                "failed_analyses": self._failed_analyses,
                "avg_latency_ms": round(self._total_latency_ms / total) if total else 0,
                "sources": {},
            }
            for name, sm in self._sources.items():
                summary["sources"][name] = {
                    "calls": sm.calls,
                    "ok": sm.ok,
                    "empty": sm.empty,
                    "timeout": sm.timeout,
                    "error": sm.error,
                    "success_pct": round(sm.success_pct, 1),
                    "avg_latency_ms": round(sm.avg_latency_ms),
                    "max_latency_ms": round(sm.max_latency_ms),
                }
            return summary

    def format_stats_line(self) -> str:
        """One-line summary for shutdown logs."""
        with self._lock:
            total = self._total_analyses
            timeouts = sum(sm.timeout for sm in self._sources.values())
            errors = sum(sm.error for sm in self._sources.values())
            avg = self._total_latency_ms / total if total else 0.0
            return (
                f"analyses={total} fallback={self._fallback_analyses} "
                f"avg_lat={avg:.0f}ms timeouts={timeouts} errors={errors}"
            )
