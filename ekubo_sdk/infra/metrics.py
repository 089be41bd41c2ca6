from __future__ import annotations

from collections import defaultdict, deque
from typing import Any, Deque, Dict, List, Optional

POLL_QUOTE = "quote"
POLL_ERROR = "error"


class Metrics:
    """Request, failure and poll counts for one client, plus recent latencies.

    Owned by a client instance; pass ``None`` wherever metrics are optional to
    skip recording.
    """

    def __init__(self, max_samples: int = 2000) -> None:
        self.requests = 0
        self.requests_by_host: Dict[str, int] = defaultdict(int)
        self.failures: Dict[str, int] = defaultdict(int)
        self.polls: Dict[str, int] = defaultdict(int)
        self._latency_ms: Deque[float] = deque(maxlen=max(1, int(max_samples)))

    def reset(self) -> None:
        self.requests = 0
        self.requests_by_host.clear()
        self.failures.clear()
        self.polls.clear()
        self._latency_ms.clear()

    def record_request(self, host: str) -> None:
        self.requests += 1
        self.requests_by_host[host or "unknown"] += 1

    def record_failure(self, reason: str) -> None:
        self.failures[reason or "unknown"] += 1

    def record_latency(self, ms: float) -> None:
        v = float(ms)
        if v != v:  # NaN
            return
        self._latency_ms.append(v)

    def record_poll(self, outcome: str) -> None:
        self.polls[outcome] += 1

    @staticmethod
    def _percentile(vals: List[float], pct: float) -> Optional[float]:
        if not vals:
            return None
        v = sorted(vals)
        k = max(0, min(len(v) - 1, int(round((pct / 100.0) * (len(v) - 1)))))
        return float(v[k])

    def latency(self) -> Dict[str, Any]:
        vals = list(self._latency_ms)
        return {
            "count": len(vals),
            "p50": self._percentile(vals, 50.0),
            "p95": self._percentile(vals, 95.0),
        }

    def snapshot(self) -> Dict[str, Any]:
        return {
            "requests": self.requests,
            "requests_by_host": dict(self.requests_by_host),
            "failures": dict(self.failures),
            "polls": dict(self.polls),
            "latency_ms": self.latency(),
        }
