"""Engine facade: one transformer per error category.

Usage::

    engine = ErrorTransformationEngine()
    await engine.apply(content, ErrorCategory.ORIENTATION, {"type": "substitution"})

Content records are mutated in place. Callers must serialize access to a
given record; the engine holds no locks.
"""

import inspect
import logging
import random
from typing import Any

from lsf_errors.config import settings
from lsf_errors.core.accuracy import Content
from lsf_errors.core.facial import FacialExpressionTransformer
from lsf_errors.core.handshape import HandConfigurationTransformer
from lsf_errors.core.location import LocationTransformer
from lsf_errors.core.movement import MovementTransformer
from lsf_errors.core.orientation import OrientationTransformer
from lsf_errors.core.proforme import ProformeTransformer
from lsf_errors.core.rhythm import RhythmTransformer
from lsf_errors.core.sign_order import SignOrderTransformer
from lsf_errors.core.spatial.transformer import SyntacticSpaceTransformer
from lsf_errors.exceptions import InvalidTransformationError
from lsf_errors.models.catalog import (
    ErrorCatalogEntry,
    ErrorCategory,
    Transformation,
    build_default_catalog,
    parse_transformation,
)

logger = logging.getLogger(__name__)

TRANSFORMER_CLASSES = {
    ErrorCategory.HAND_CONFIGURATION: HandConfigurationTransformer,
    ErrorCategory.LOCATION: LocationTransformer,
    ErrorCategory.MOVEMENT: MovementTransformer,
    ErrorCategory.ORIENTATION: OrientationTransformer,
    ErrorCategory.FACIAL_EXPRESSION: FacialExpressionTransformer,
    ErrorCategory.RHYTHM: RhythmTransformer,
    ErrorCategory.SYNTACTIC_SPACE: SyntacticSpaceTransformer,
    ErrorCategory.SIGN_ORDER: SignOrderTransformer,
    ErrorCategory.PROFORME: ProformeTransformer,
}


class ErrorTransformationEngine:
    """Routes transformation requests to the matching category transformer."""

    def __init__(
        self,
        catalog: dict[ErrorCategory, ErrorCatalogEntry] | None = None,
        rng: random.Random | None = None,
    ):
        self.catalog = catalog or build_default_catalog(settings.default_severity)
        self.rng = rng or random.Random(settings.random_seed)
        self.transformers: dict[ErrorCategory, Any] = {
            category: TRANSFORMER_CLASSES[category](entry, self.rng)
            for category, entry in self.catalog.items()
            if category in TRANSFORMER_CLASSES
        }

    def transformer_for(self, category: ErrorCategory | str) -> Any | None:
        resolved = self._resolve_category(category)
        if resolved is None:
            return None
        return self.transformers.get(resolved)

    async def apply(
        self,
        content: Content,
        category: ErrorCategory | str,
        transformation: Transformation | dict[str, Any],
    ) -> None:
        """Apply one transformation to *content* in place.

        Args:
            content: The content record holding ``parameters`` and ``sequence``
            category: The error category to perturb
            transformation: A parsed transformation or a mapping to parse

        Unparseable mappings fall back to the category's default
        transformation; unknown categories are logged and ignored.
        """
        transformer = self.transformer_for(category)
        if transformer is None:
            logger.warning("No transformer for category '%s'", category)
            return

        try:
            transform = parse_transformation(transformation)
        except InvalidTransformationError as e:
            logger.warning("Invalid transformation for %s, applying default: %s", transformer.category.value, e)
            await self._call(transformer.apply_default_transformation, content)
            return

        await self._call(transformer.apply_transformation, content, transform)

    async def apply_default(self, content: Content, category: ErrorCategory | str) -> None:
        transformer = self.transformer_for(category)
        if transformer is None:
            logger.warning("No transformer for category '%s'", category)
            return
        await self._call(transformer.apply_default_transformation, content)

    @staticmethod
    async def _call(method, *args) -> None:
        # spatial transformers are async, the others run synchronously
        result = method(*args)
        if inspect.isawaitable(result):
            await result

    @staticmethod
    def _resolve_category(category: ErrorCategory | str) -> ErrorCategory | None:
        if isinstance(category, ErrorCategory):
            return category
        try:
            return ErrorCategory(category)
        except ValueError:
            return None
