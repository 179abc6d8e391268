"""Syntactic space transformer.

Coordinates the spatial subsystem for one catalog entry: builds a
transformation context from the ``space`` parameter, resolves a strategy
from the registry and falls back to a generic accuracy penalty whenever
the strategy is unsupported, rejects the parameter or fails.
"""

import logging
import random
import time

from lsf_errors.config import settings
from lsf_errors.core.accuracy import (
    Content,
    Parameter,
    clamp_accuracy,
    current_accuracy,
    get_parameter,
    reduce_accuracy,
)
from lsf_errors.core.spatial.metrics import SpaceTransformationMetrics
from lsf_errors.core.spatial.registry import LearningLevel, StrategyRegistry, Unsupported
from lsf_errors.core.spatial.strategies import SpaceStrategy, SpaceTransformationContext
from lsf_errors.core.spatial.validator import SyntacticSpaceValidator
from lsf_errors.core.spatial.zones import ZoneManager
from lsf_errors.exceptions import StrategyExecutionError
from lsf_errors.models.catalog import (
    ErrorCatalogEntry,
    ErrorCategory,
    Transformation,
    transformation_factor,
)
from lsf_errors.models.reports import SpatialAnalysis

logger = logging.getLogger(__name__)

DEFAULT_TRANSFORMATION_TYPE = "default_degradation"
FALLBACK_STRATEGY = "fallback"
MAX_FALLBACK_REDUCTION = 0.4


def spatial_complexity(space: Parameter) -> float:
    complexity = 0.0
    if space.get("zone_confusion"):
        complexity += 0.3
    if space.get("random_placement"):
        complexity += 0.4
    if space.get("location_omission"):
        complexity += 0.2
    scale = space.get("scale")
    if scale is not None and scale < 0.8:
        complexity += 0.1
    return min(1.0, complexity)


def semantic_density(space: Parameter) -> float:
    reference_weight = 0.3 if space.get("reference_consistency") else 0.0
    scale = space.get("scale")
    spatial_weight = (1.0 if scale is None else scale) * 0.7
    return current_accuracy(space) * (reference_weight + spatial_weight)


class SyntacticSpaceTransformer:
    """Simulates misuse of the signing space.

    Strategies are async; ``apply_transformation`` and
    ``apply_default_transformation`` must be awaited.
    """

    category = ErrorCategory.SYNTACTIC_SPACE

    def __init__(
        self,
        entry: ErrorCatalogEntry,
        rng: random.Random | None = None,
        level: LearningLevel | None = None,
        preserve_semantics: bool | None = None,
    ):
        self.entry = entry
        self.rng = rng or random.Random()
        self.preserve_semantics = (
            settings.preserve_semantics if preserve_semantics is None else preserve_semantics
        )
        self.zone_manager = ZoneManager(settings.zone_history_limit)
        self.registry = StrategyRegistry(self.zone_manager, self.rng, level)
        self.validator = SyntacticSpaceValidator()
        self.metrics = SpaceTransformationMetrics(settings.metrics_history_limit)

    def get_target_parameter(self, content: Content) -> Parameter | None:
        return get_parameter(content, "space")

    async def apply_transformation(self, content: Content, transform: Transformation) -> None:
        space = self._checked_space(content)
        if space is None:
            return

        factor = getattr(transform, "factor", None)
        severity = transformation_factor(transform, self.entry.default_transformation.severity)
        context = self.build_context(space, transform.type.value, severity, factor)
        await self._run(content, space, context, self.registry.create(transform.type.value))

    async def apply_default_transformation(self, content: Content) -> None:
        space = self._checked_space(content)
        if space is None:
            return

        context = self.build_context(
            space, DEFAULT_TRANSFORMATION_TYPE, self.entry.default_transformation.severity
        )
        await self._run(content, space, context, self.registry.create_default())

    def build_context(
        self,
        space: Parameter,
        transformation_type: str,
        severity: float,
        factor: float | None = None,
    ) -> SpaceTransformationContext:
        return SpaceTransformationContext(
            transformation_type=transformation_type,
            severity=clamp_accuracy(severity),
            factor=factor,
            original_accuracy=current_accuracy(space),
            preserve_semantics=self.preserve_semantics,
            spatial_complexity=spatial_complexity(space),
            semantic_density=semantic_density(space),
            extra={"has_referential_elements": bool(space.get("reference_consistency"))},
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _checked_space(self, content: Content) -> Parameter | None:
        space = self.get_target_parameter(content)
        if space is None:
            logger.warning("No space parameter found in content")
            return None
        errors = self.validator.range_errors(space)
        if errors:
            logger.warning("Space parameter rejected: %s", "; ".join(errors))
            return None
        return space

    async def _run(
        self,
        content: Content,
        space: Parameter,
        context: SpaceTransformationContext,
        strategy: SpaceStrategy | Unsupported,
    ) -> None:
        accuracy_before = current_accuracy(space)
        start = time.perf_counter()
        success = False

        zones = space.get("zones")
        if isinstance(zones, list):
            self.zone_manager.register_placements(zones)

        if isinstance(strategy, Unsupported):
            logger.warning(
                "No spatial strategy for '%s' (%s), applying fallback", strategy.key, strategy.reason
            )
            strategy_name = FALLBACK_STRATEGY
        else:
            strategy_name = strategy.name
            if not strategy.validate(space):
                logger.warning("Validation failed for spatial strategy '%s'", strategy_name)
            else:
                try:
                    await strategy.apply(space, context)
                    success = True
                except StrategyExecutionError as e:
                    logger.warning("Spatial strategy '%s' could not run: %s", strategy_name, e)
                except Exception as e:
                    logger.error(
                        "Spatial strategy '%s' failed: %s: %s",
                        strategy_name, type(e).__name__, e, exc_info=True,
                    )

        if success:
            impact = strategy.impact_score
            logger.debug("Spatial strategy '%s' applied, impact %.3f", strategy_name, impact)
        else:
            impact = self.apply_fallback(space, context)
            strategy_name = FALLBACK_STRATEGY

        execution_ms = (time.perf_counter() - start) * 1000
        accuracy_after = current_accuracy(space)
        self.metrics.record(
            context,
            success=success,
            impact_score=impact,
            final_accuracy=accuracy_after,
            execution_ms=execution_ms,
            fallback=not success,
        )
        content["spatial_analysis"] = self._build_analysis(
            space, context, strategy_name, not success, accuracy_before, impact
        ).model_dump()

    @staticmethod
    def apply_fallback(space: Parameter, context: SpaceTransformationContext) -> float:
        """Guaranteed penalty when no strategy could run; returns the applied reduction."""
        before = current_accuracy(space)
        after = reduce_accuracy(space, min(MAX_FALLBACK_REDUCTION, context.severity), "space")
        logger.debug("Spatial fallback applied: %.3f -> %.3f", before, after)
        return before - after

    def _build_analysis(
        self,
        space: Parameter,
        context: SpaceTransformationContext,
        strategy_name: str,
        fallback: bool,
        accuracy_before: float,
        impact: float,
    ) -> SpatialAnalysis:
        coherence = self.registry.manipulation.analyze_coherence(space)
        issues = coherence.errors + coherence.warnings
        issues.extend(e for e in self.validator.get_validation_errors(space) if e not in issues)
        return SpatialAnalysis(
            transformation_type=context.transformation_type,
            strategy=strategy_name,
            fallback_applied=fallback,
            accuracy_before=accuracy_before,
            accuracy_after=current_accuracy(space),
            impact_score=impact,
            coherence_score=coherence.coherence_score,
            spatial_complexity=spatial_complexity(space),
            semantic_density=semantic_density(space),
            issues=issues,
            recommendations=list(coherence.suggestions),
        )

    # ------------------------------------------------------------------
    # Read-back
    # ------------------------------------------------------------------

    def get_metrics(self) -> dict:
        return self.metrics.get_metrics()

    def reset_metrics(self) -> None:
        self.metrics.reset()

    def available_strategies(self) -> list[str]:
        return self.registry.keys

    def has_strategy(self, key: str) -> bool:
        return key in self.registry.keys
