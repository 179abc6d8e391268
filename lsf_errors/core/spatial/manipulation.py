"""Reference-level manipulations of signing space.

Every ``apply_*`` coroutine follows the same four steps: find eligible
zones or candidates in the zone manager, pick a severity-weighted subset,
compute an accuracy impact, then mutate both the space parameter and the
zone manager. Unmet preconditions produce an unsuccessful
``ManipulationResult`` instead of an exception.
"""

import logging
import math
import random
from dataclasses import asdict, dataclass, field

from lsf_errors.core.accuracy import Parameter, reduce_accuracy
from lsf_errors.core.spatial.zones import ReferentialZone, ZoneManager
from lsf_errors.models.reports import ManipulationResult

logger = logging.getLogger(__name__)

PROXIMITY_THRESHOLD = 30.0

# Maximum zone count per organisation complexity level
COMPLEXITY_LEVELS = [("simple", 2), ("moderate", 4), ("complex", 6)]


@dataclass(frozen=True)
class InconsistencyTarget:
    type: str
    description: str
    affected_zones: list[str]
    severity: float


@dataclass(frozen=True)
class OmissibleReference:
    id: str
    description: str
    importance: float
    zone_id: str


@dataclass(frozen=True)
class PronounConfusionPattern:
    pattern_id: str
    description: str
    affected_pronouns: list[str]
    confusion_type: str
    severity: float


@dataclass(frozen=True)
class SpatialOrganization:
    type: str
    zones: list[str]
    coherence_score: float
    complexity_level: str


@dataclass(frozen=True)
class PositionChange:
    zone_id: str
    old_position: tuple[float, float]
    new_position: tuple[float, float]


@dataclass(frozen=True)
class ReorganizationPlan:
    type: str
    affected_zones: list[str]
    changes: list[PositionChange]
    expected_impact: float


@dataclass
class CoherenceAnalysis:
    coherence_score: float
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


def _failure(message: str) -> ManipulationResult:
    logger.info("Spatial manipulation not applicable: %s", message)
    return ManipulationResult(success=False, error_message=message)


class SpatialManipulationService:
    """Ambiguity, inconsistency, omission, pronoun and reorganisation errors."""

    def __init__(self, zone_manager: ZoneManager, rng: random.Random | None = None):
        self.zone_manager = zone_manager
        self.rng = rng or random.Random()

    # ------------------------------------------------------------------
    # Ambiguous reference
    # ------------------------------------------------------------------

    def ambiguity_candidates(self) -> list[ReferentialZone]:
        """Established, used and still consistent zones."""
        return [
            z for z in self.zone_manager.all_zones()
            if z.established and z.usage_frequency > 0.3 and z.consistency > 0.7
        ]

    @staticmethod
    def select_ambiguity_targets(candidates: list[ReferentialZone], severity: float) -> list[ReferentialZone]:
        count = min(len(candidates), math.ceil(2 + severity * 2))
        ranked = sorted(candidates, key=lambda z: (z.semantic_role, -z.usage_frequency))
        return ranked[:count]

    @staticmethod
    def ambiguity_impact(zones: list[ReferentialZone], severity: float) -> float:
        impact = 0.2 + (len(zones) - 2) * 0.1
        if len({z.semantic_role for z in zones}) == 1:
            impact += 0.2
        impact *= 0.5 + severity * 0.5
        return min(0.8, impact)

    async def apply_ambiguous_reference(self, space: Parameter, severity: float) -> ManipulationResult:
        candidates = self.ambiguity_candidates()
        if len(candidates) < 2:
            return _failure("Not enough established zones to create an ambiguity")

        targets = self.select_ambiguity_targets(candidates, severity)
        zone_ids = [z.id for z in targets]
        space["ambiguous_reference"] = True
        space["ambiguous_zones"] = zone_ids
        self.zone_manager.reduce_consistency(zone_ids, severity * 0.4)

        impact = self.ambiguity_impact(targets, severity)
        reduce_accuracy(space, impact, "space")
        return ManipulationResult(success=True, accuracy_impact=impact, affected_zones=zone_ids)

    # ------------------------------------------------------------------
    # Inconsistent reference
    # ------------------------------------------------------------------

    def inconsistency_targets(self) -> list[InconsistencyTarget]:
        zones = self.zone_manager.all_zones()
        subjects = [z for z in zones if z.semantic_role == "subject"]
        objects = [z for z in zones if z.semantic_role == "object"]
        temporals = [z for z in zones if z.semantic_role == "temporal"]
        targets = []

        if len(subjects) > 1:
            targets.append(InconsistencyTarget(
                "multiple_subjects", "Several subject loci established at once",
                [z.id for z in subjects], 0.7,
            ))
        if len(objects) > 2:
            targets.append(InconsistencyTarget(
                "excessive_objects", "Too many object loci for the discourse",
                [z.id for z in objects[2:]], 0.5,
            ))

        established = [z for z in zones if z.established]
        for i, first in enumerate(established):
            for second in established[i + 1:]:
                if first.overlaps(second):
                    targets.append(InconsistencyTarget(
                        "zone_overlap", f"Overlap between {first.name} and {second.name}",
                        [first.id, second.id], 0.6,
                    ))

        if len(temporals) > 3:
            targets.append(InconsistencyTarget(
                "temporal_overload", "Too many simultaneous time references",
                [z.id for z in temporals[3:]], 0.4,
            ))
        return targets

    def select_inconsistency(self, targets: list[InconsistencyTarget], severity: float) -> InconsistencyTarget:
        suitable = [t for t in targets if severity - 0.2 <= t.severity <= severity + 0.2]
        if not suitable:
            return targets[0]
        return self.rng.choice(suitable)

    @staticmethod
    def inconsistency_impact(target: InconsistencyTarget, severity: float) -> float:
        return min(0.9, (target.severity + len(target.affected_zones) * 0.1) * severity)

    async def apply_inconsistent_reference(self, space: Parameter, severity: float) -> ManipulationResult:
        targets = self.inconsistency_targets()
        if not targets:
            return _failure("No inconsistency target found among active zones")

        target = self.select_inconsistency(targets, severity)
        space["reference_consistency"] = False
        space["inconsistency_type"] = target.type
        space["affected_zones"] = list(target.affected_zones)
        self.zone_manager.reduce_consistency(target.affected_zones, severity * 0.3)

        impact = self.inconsistency_impact(target, severity)
        reduce_accuracy(space, impact, "space")
        return ManipulationResult(success=True, accuracy_impact=impact, affected_zones=list(target.affected_zones))

    # ------------------------------------------------------------------
    # Reference omission
    # ------------------------------------------------------------------

    def omissible_references(self) -> list[OmissibleReference]:
        references = []
        for zone in self.zone_manager.all_zones():
            if zone.usage_frequency < 0.5 and zone.consistency > 0.5:
                references.append(OmissibleReference(
                    f"ref_{zone.id}", f"Reference to {zone.name}", zone.usage_frequency, zone.id,
                ))
            if zone.usage_frequency > 0.8:
                references.append(OmissibleReference(
                    f"redundant_{zone.id}", f"Redundant reference to {zone.name}", 0.3, zone.id,
                ))
        return references

    @staticmethod
    def select_omission_targets(references: list[OmissibleReference], severity: float) -> list[OmissibleReference]:
        count = math.ceil(len(references) * severity)
        return sorted(references, key=lambda r: r.importance)[:count]

    @staticmethod
    def omission_impact(references: list[OmissibleReference]) -> float:
        if not references:
            return 0.0
        average = sum(r.importance for r in references) / len(references)
        return min(0.7, average + len(references) * 0.1)

    async def apply_reference_omission(self, space: Parameter, severity: float) -> ManipulationResult:
        references = self.omissible_references()
        if not references:
            return _failure("No omissible reference found")

        targets = self.select_omission_targets(references, severity)
        if not targets:
            return _failure("Severity too low to omit any reference")

        ids = [r.id for r in targets]
        space["reference_omission"] = True
        space["omitted_references"] = ids

        impact = self.omission_impact(targets)
        reduce_accuracy(space, impact, "space")
        return ManipulationResult(success=True, accuracy_impact=impact, affected_zones=ids)

    # ------------------------------------------------------------------
    # Pronoun confusion
    # ------------------------------------------------------------------

    def proximity_pairs(self) -> list[tuple[ReferentialZone, ReferentialZone]]:
        zones = self.zone_manager.all_zones()
        return [
            (first, second)
            for i, first in enumerate(zones)
            for second in zones[i + 1:]
            if first.distance_to(second) < PROXIMITY_THRESHOLD
        ]

    def pronoun_confusion_patterns(self) -> list[PronounConfusionPattern]:
        zones = self.zone_manager.all_zones()
        roles = [z.semantic_role for z in zones]
        patterns = []

        if "subject" in roles and "object" in roles:
            patterns.append(PronounConfusionPattern(
                "subject_object_confusion", "Subject and object pronouns swapped",
                ["il/elle", "lui/elle"], "role_reversal", 0.6,
            ))
        if roles.count("temporal") > 1:
            patterns.append(PronounConfusionPattern(
                "temporal_confusion", "Time references pointed at the wrong locus",
                ["maintenant", "alors", "après"], "temporal_mismatch", 0.4,
            ))
        if self.proximity_pairs():
            patterns.append(PronounConfusionPattern(
                "proximity_confusion", "Neighbouring loci pointed at interchangeably",
                ["celui-ci", "celui-là"], "spatial_proximity", 0.5,
            ))
        return patterns

    def select_confusion_pattern(
        self, patterns: list[PronounConfusionPattern], severity: float
    ) -> PronounConfusionPattern:
        suitable = [p for p in patterns if abs(p.severity - severity) < 0.3]
        if not suitable:
            return patterns[0]
        return self.rng.choice(suitable)

    @staticmethod
    def confusion_impact(pattern: PronounConfusionPattern, severity: float) -> float:
        return min(0.8, (pattern.severity + len(pattern.affected_pronouns) * 0.05) * severity)

    async def apply_pronoun_confusion(self, space: Parameter, severity: float) -> ManipulationResult:
        patterns = self.pronoun_confusion_patterns()
        if not patterns:
            return _failure("No pronoun confusion pattern available")

        pattern = self.select_confusion_pattern(patterns, severity)
        space["pronoun_confusion"] = True
        space["confusion_pattern"] = pattern.pattern_id
        space["affected_pronouns"] = list(pattern.affected_pronouns)

        impact = self.confusion_impact(pattern, severity)
        reduce_accuracy(space, impact, "space")
        return ManipulationResult(success=True, accuracy_impact=impact)

    # ------------------------------------------------------------------
    # Spatial reorganisation
    # ------------------------------------------------------------------

    def analyze_spatial_organization(self) -> SpatialOrganization:
        zones = self.zone_manager.all_zones()
        established = [z for z in zones if z.established]
        coherence = sum(z.consistency for z in established) / len(established) if established else 1.0
        return SpatialOrganization(
            type="current_organization",
            zones=[z.id for z in zones],
            coherence_score=coherence,
            complexity_level=self._complexity_level(len(zones)),
        )

    @staticmethod
    def _complexity_level(zone_count: int) -> str:
        for level, maximum in COMPLEXITY_LEVELS:
            if zone_count <= maximum:
                return level
        return "expert"

    def generate_reorganization_plan(
        self, organization: SpatialOrganization, severity: float
    ) -> ReorganizationPlan | None:
        if len(organization.zones) < 2:
            return None

        affected = organization.zones[:math.ceil(len(organization.zones) * severity)]
        changes = []
        for zone_id in affected:
            zone = self.zone_manager.get_zone(zone_id)
            old = zone.coordinates if zone else (0.0, 0.0)
            new = (
                self.rng.uniform(-20, 20) * severity,
                self.rng.uniform(-20, 20) * severity,
            )
            changes.append(PositionChange(zone_id, old, new))

        return ReorganizationPlan(
            type="major_reorganization" if severity > 0.7 else "minor_reorganization",
            affected_zones=affected,
            changes=changes,
            expected_impact=severity * 0.6,
        )

    @staticmethod
    def reorganization_impact(plan: ReorganizationPlan) -> float:
        return min(0.8, plan.expected_impact + len(plan.affected_zones) * 0.1 + len(plan.changes) * 0.05)

    async def apply_spatial_reorganization(self, space: Parameter, severity: float) -> ManipulationResult:
        organization = self.analyze_spatial_organization()
        plan = self.generate_reorganization_plan(organization, severity)
        if plan is None or not plan.affected_zones:
            return _failure("Cannot build a reorganisation plan")

        space["spatial_reorganization"] = True
        space["original_organization"] = asdict(organization)
        space["new_organization"] = asdict(plan)
        self.zone_manager.reduce_consistency(plan.affected_zones, 0.2)

        impact = 0.5 * severity
        reduce_accuracy(space, impact, "space")
        return ManipulationResult(success=True, accuracy_impact=impact, affected_zones=list(plan.affected_zones))

    # ------------------------------------------------------------------
    # Generic degradation and diagnostics
    # ------------------------------------------------------------------

    @staticmethod
    def apply_generic_degradation(space: Parameter, severity: float) -> ManipulationResult:
        reduce_accuracy(space, severity, "space")
        space["generic_error"] = True
        space["error_severity"] = severity
        return ManipulationResult(success=True, accuracy_impact=severity)

    @staticmethod
    def analyze_coherence(space: Parameter) -> CoherenceAnalysis:
        analysis = CoherenceAnalysis(coherence_score=1.0)
        checks = [
            ("ambiguous_reference", True, 0.2, "warnings",
             "Ambiguous spatial references", "Clarify spatial references"),
            ("reference_consistency", False, 0.3, "errors",
             "Inconsistent spatial reference", "Restore reference consistency"),
            ("reference_omission", True, 0.15, "warnings",
             "Spatial references omitted", "Complete the missing references"),
            ("pronoun_confusion", True, 0.1, "warnings",
             "Pronoun confusion detected", "Clarify the use of spatial pronouns"),
            ("spatial_reorganization", True, 0.1, "warnings",
             "Spatial reorganisation detected", "Check the natural spatial order"),
        ]
        for flag, trigger, penalty, bucket, message, suggestion in checks:
            if space.get(flag) is trigger:
                getattr(analysis, bucket).append(message)
                analysis.suggestions.append(suggestion)
                analysis.coherence_score -= penalty
        analysis.coherence_score = max(0.0, min(1.0, analysis.coherence_score))
        return analysis

    @staticmethod
    def validate_config(
        severity: float,
        max_zones_affected: int | None = None,
        min_accuracy_threshold: float | None = None,
    ) -> bool:
        if not 0.0 <= severity <= 1.0:
            return False
        if max_zones_affected is not None and max_zones_affected < 1:
            return False
        if min_accuracy_threshold is not None and not 0.0 <= min_accuracy_threshold <= 1.0:
            return False
        return True
