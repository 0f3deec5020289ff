from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .replica.models import ReplicationOutcome


@dataclass(frozen=True)
class AggregateReport:
    total: int
    succeeded: int
    failed: int
    affected_total: int
    critical_failure: bool
    total_duration_ms: Optional[int] = None
    duration_sum_ms: Optional[int] = None
    duration_avg_ms: Optional[float] = None
    duration_min_ms: Optional[int] = None
    duration_max_ms: Optional[int] = None
    # Gain of the concurrent run over running the successes one after another.
    estimated_speedup_pct: Optional[int] = None

    @property
    def partial_failure(self) -> bool:
        return self.failed > 0 and not self.critical_failure


def is_critical(failed: int, total: int) -> bool:
    """Strictly more than half failed. Exactly half is not critical."""
    return failed > total / 2


def aggregate(
    outcomes: Iterable[ReplicationOutcome],
    total_duration_ms: Optional[int] = None,
) -> AggregateReport:
    """
    Fold per-replica outcomes into an AggregateReport.

    Duration statistics cover successful outcomes only and are None when
    nothing succeeded. `total_duration_ms` is the wall clock of the whole
    fan-out, measured by the caller. No I/O, no side effects.
    """
    items = list(outcomes)
    successes = [o for o in items if o.success]
    failed = len(items) - len(successes)

    affected_total = sum(o.affected_count or 0 for o in successes)

    durations = [o.duration_ms or 0 for o in successes]
    duration_sum = duration_avg = duration_min = duration_max = None
    speedup = None
    if durations:
        duration_sum = sum(durations)
        duration_avg = duration_sum / len(durations)
        duration_min = min(durations)
        duration_max = max(durations)
        if total_duration_ms is not None and duration_sum > 0:
            speedup = round((duration_sum - total_duration_ms) / duration_sum * 100)

    return AggregateReport(
        total=len(items),
        succeeded=len(successes),
        failed=failed,
        affected_total=affected_total,
        critical_failure=is_critical(failed, len(items)),
        total_duration_ms=total_duration_ms,
        duration_sum_ms=duration_sum,
        duration_avg_ms=duration_avg,
        duration_min_ms=duration_min,
        duration_max_ms=duration_max,
        estimated_speedup_pct=speedup,
    )
