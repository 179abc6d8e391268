"""In-process metrics for spatial transformations."""

import time
from dataclasses import dataclass, field
from typing import Any

from lsf_errors.config import settings
from lsf_errors.core.spatial.strategies import SpaceTransformationContext


@dataclass
class TransformationRecord:
    transformation_type: str
    severity: float
    success: bool
    impact_score: float
    final_accuracy: float
    execution_ms: float
    fallback: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)


@dataclass
class _TypeStats:
    count: int = 0
    successes: int = 0
    impact_total: float = 0.0


class SpaceTransformationMetrics:
    """Append-only record of spatial transformations with aggregate read-back."""

    def __init__(self, history_limit: int | None = None):
        self.history_limit = history_limit or settings.metrics_history_limit
        self.reset()

    def reset(self) -> None:
        self.session_start = time.time()
        self.total = 0
        self._by_type: dict[str, _TypeStats] = {}
        self._execution_total = 0.0
        self.history: list[TransformationRecord] = []

    def record(
        self,
        context: SpaceTransformationContext,
        success: bool = True,
        impact_score: float | None = None,
        final_accuracy: float | None = None,
        execution_ms: float = 0.0,
        fallback: bool = False,
    ) -> TransformationRecord:
        """Store one transformation outcome.

        Args:
            context: The context the strategy ran with
            success: Whether the requested strategy itself succeeded
            impact_score: Defaults to the context severity
            final_accuracy: Defaults to original accuracy minus severity
            execution_ms: Wall time spent in the strategy
            fallback: True when the fallback degradation ran instead
        """
        if impact_score is None:
            impact_score = context.severity
        if final_accuracy is None:
            final_accuracy = max(0.0, context.original_accuracy - context.severity)

        record = TransformationRecord(
            transformation_type=context.transformation_type,
            severity=context.severity,
            success=success,
            impact_score=impact_score,
            final_accuracy=final_accuracy,
            execution_ms=execution_ms,
            fallback=fallback,
            metadata={
                "factor": context.factor,
                "preserve_semantics": context.preserve_semantics,
                "spatial_complexity": context.spatial_complexity,
            },
        )
        self.history.append(record)
        if len(self.history) > self.history_limit:
            del self.history[0]

        self.total += 1
        stats = self._by_type.setdefault(record.transformation_type, _TypeStats())
        stats.count += 1
        stats.successes += int(success)
        stats.impact_total += impact_score
        self._execution_total += execution_ms
        return record

    # ------------------------------------------------------------------
    # Read-back
    # ------------------------------------------------------------------

    @property
    def counts_by_type(self) -> dict[str, int]:
        return {t: s.count for t, s in self._by_type.items()}

    @property
    def success_rates(self) -> dict[str, float]:
        return {t: s.successes / s.count for t, s in self._by_type.items()}

    @property
    def average_impacts(self) -> dict[str, float]:
        return {t: s.impact_total / s.count for t, s in self._by_type.items()}

    @property
    def average_execution_ms(self) -> float:
        return self._execution_total / self.total if self.total else 0.0

    def most_used_type(self) -> str | None:
        if not self._by_type:
            return None
        return max(self._by_type.items(), key=lambda item: item[1].count)[0]

    def overall_success_rate(self) -> float:
        if not self.total:
            return 0.0
        return sum(s.successes for s in self._by_type.values()) / self.total

    def overall_average_impact(self) -> float:
        if not self.total:
            return 0.0
        return sum(s.impact_total for s in self._by_type.values()) / self.total

    def average_efficiency(self) -> float:
        if not self.history:
            return 0.0
        return sum(1 - r.impact_score for r in self.history) / len(self.history)

    def performance_grade(self) -> str:
        if not self.total:
            return "F"
        avg_ms = self.average_execution_ms
        speed = 1.0 if avg_ms < 100 else max(0.0, 1 - avg_ms / 1000)
        score = self.overall_success_rate() * 0.4 + self.average_efficiency() * 0.4 + speed * 0.2
        for grade, threshold in (("A", 0.9), ("B", 0.8), ("C", 0.7), ("D", 0.6)):
            if score >= threshold:
                return grade
        return "F"

    def impact_trend(self, window: int = 20) -> str:
        recent = self.history[-window:]
        if len(recent) < 2:
            return "stable"
        middle = len(recent) // 2
        first = sum(r.impact_score for r in recent[:middle]) / middle
        second = sum(r.impact_score for r in recent[middle:]) / (len(recent) - middle)
        if first == 0:
            return "increasing" if second > 0 else "stable"
        change = (second - first) / first
        if change > 0.15:
            return "increasing"
        if change < -0.15:
            return "decreasing"
        return "stable"

    def summary(self) -> dict[str, Any]:
        return {
            "total_transformations": self.total,
            "most_used_transformation": self.most_used_type(),
            "average_impact_score": self.overall_average_impact(),
            "overall_success_rate": self.overall_success_rate(),
            "fallback_count": sum(1 for r in self.history if r.fallback),
            "session_duration": time.time() - self.session_start,
            "performance_grade": self.performance_grade(),
        }

    def get_metrics(self) -> dict[str, Any]:
        return {
            "summary": self.summary(),
            "detailed": {
                "total_transformations": self.total,
                "transformations_by_type": self.counts_by_type,
                "average_impact_scores": self.average_impacts,
                "success_rates": self.success_rates,
                "average_execution_ms": self.average_execution_ms,
            },
            "trends": {"impact": self.impact_trend()},
        }
