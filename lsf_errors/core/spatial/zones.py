"""Signing-space zone vocabulary and the per-transformer referential zone state."""

import copy
import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum

from lsf_errors.config import settings

logger = logging.getLogger(__name__)


class SpatialZoneType(str, Enum):
    """Coarse regions of signing space referenced by ``space["zones"]``."""

    DOMINANT_SIDE = "dominant_side"
    NON_DOMINANT_SIDE = "non_dominant_side"
    CENTER = "center"
    UPPER = "upper"
    LOWER = "lower"
    PERIPHERAL = "peripheral"
    NEUTRAL = "neutral"


ALL_ZONE_VALUES = [z.value for z in SpatialZoneType]

# Zones a learner plausibly lands in instead of the intended one
ZONE_CONFUSIONS: dict[str, list[str]] = {
    SpatialZoneType.DOMINANT_SIDE.value: [
        SpatialZoneType.CENTER.value,
        SpatialZoneType.NON_DOMINANT_SIDE.value,
    ],
    SpatialZoneType.NON_DOMINANT_SIDE.value: [
        SpatialZoneType.CENTER.value,
        SpatialZoneType.DOMINANT_SIDE.value,
    ],
    SpatialZoneType.CENTER.value: [
        SpatialZoneType.NEUTRAL.value,
        SpatialZoneType.DOMINANT_SIDE.value,
        SpatialZoneType.NON_DOMINANT_SIDE.value,
    ],
    SpatialZoneType.UPPER.value: [SpatialZoneType.CENTER.value, SpatialZoneType.NEUTRAL.value],
    SpatialZoneType.LOWER.value: [SpatialZoneType.CENTER.value, SpatialZoneType.NEUTRAL.value],
    SpatialZoneType.PERIPHERAL.value: [
        SpatialZoneType.DOMINANT_SIDE.value,
        SpatialZoneType.NON_DOMINANT_SIDE.value,
    ],
}


@dataclass
class ReferentialZone:
    """A locus established in signing space for a discourse referent.

    Coordinates are in centimetres relative to the signer's chest centre.
    """

    id: str
    name: str
    coordinates: tuple[float, float]
    semantic_role: str
    radius: float = 10.0
    established: bool = False
    consistency: float = 1.0
    usage_frequency: float = 0.0

    def distance_to(self, other: "ReferentialZone") -> float:
        return math.dist(self.coordinates, other.coordinates)

    def overlaps(self, other: "ReferentialZone") -> bool:
        return self.distance_to(other) < self.radius + other.radius


CANONICAL_ZONES: dict[str, dict] = {
    "subject_zone": {"name": "Subject locus", "coordinates": (-30.0, 0.0), "semantic_role": "subject"},
    "object_zone": {"name": "Object locus", "coordinates": (30.0, 0.0), "semantic_role": "object"},
    "secondary_object_zone": {
        "name": "Secondary object locus",
        "coordinates": (45.0, 20.0),
        "semantic_role": "object",
    },
    "past_zone": {"name": "Past timeline", "coordinates": (0.0, -40.0), "semantic_role": "temporal"},
    "future_zone": {"name": "Future timeline", "coordinates": (0.0, 40.0), "semantic_role": "temporal"},
    "discourse_zone": {"name": "Discourse frame", "coordinates": (0.0, 15.0), "semantic_role": "discourse"},
    "modal_zone": {"name": "Modal marking", "coordinates": (-15.0, 35.0), "semantic_role": "modal"},
}


# Referential loci that sit in each region of signing space
ZONE_LOCI: dict[str, list[str]] = {
    SpatialZoneType.DOMINANT_SIDE.value: ["object_zone", "secondary_object_zone"],
    SpatialZoneType.NON_DOMINANT_SIDE.value: ["subject_zone"],
    SpatialZoneType.CENTER.value: ["discourse_zone"],
    SpatialZoneType.NEUTRAL.value: ["discourse_zone"],
    SpatialZoneType.UPPER.value: ["future_zone", "modal_zone"],
    SpatialZoneType.LOWER.value: ["past_zone"],
    SpatialZoneType.PERIPHERAL.value: ["secondary_object_zone"],
}


@dataclass
class ZoneHistoryEntry:
    action: str
    zone: str
    timestamp: float = field(default_factory=time.time)


class ZoneManager:
    """Owns one set of referential zones and a bounded action history.

    Each spatial transformer creates its own manager, so zone state is never
    shared between transformer instances.
    """

    def __init__(self, history_limit: int | None = None):
        self.history_limit = history_limit or settings.zone_history_limit
        self._zones: dict[str, ReferentialZone] = {}
        self._history: list[ZoneHistoryEntry] = []
        self._load_canonical_zones()

    def _load_canonical_zones(self) -> None:
        for zone_id, data in CANONICAL_ZONES.items():
            self._zones[zone_id] = ReferentialZone(id=zone_id, **data)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_zone(self, zone_id: str) -> ReferentialZone | None:
        return self._zones.get(zone_id)

    def all_zones(self) -> list[ReferentialZone]:
        return list(self._zones.values())

    def snapshot(self) -> dict[str, ReferentialZone]:
        """Deep copy of the current zones keyed by id."""
        return copy.deepcopy(self._zones)

    @property
    def zone_count(self) -> int:
        return len(self._zones)

    @property
    def history(self) -> list[ZoneHistoryEntry]:
        return list(self._history)

    def filter_zones(
        self,
        established: bool | None = None,
        min_consistency: float | None = None,
        min_usage: float | None = None,
        semantic_role: str | None = None,
    ) -> list[ReferentialZone]:
        zones = []
        for zone in self._zones.values():
            if established is not None and zone.established != established:
                continue
            if min_consistency is not None and zone.consistency < min_consistency:
                continue
            if min_usage is not None and zone.usage_frequency < min_usage:
                continue
            if semantic_role is not None and zone.semantic_role != semantic_role:
                continue
            zones.append(zone)
        return zones

    def statistics(self) -> dict:
        zones = self.all_zones()
        most_used = max(zones, key=lambda z: z.usage_frequency, default=None)
        return {
            "total_zones": len(zones),
            "established_zones": sum(1 for z in zones if z.established),
            "average_consistency": sum(z.consistency for z in zones) / len(zones) if zones else 0.0,
            "total_usage": sum(z.usage_frequency for z in zones),
            "most_used_zone": most_used.id if most_used else None,
            "history_size": len(self._history),
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_zone(self, zone: ReferentialZone) -> bool:
        if not zone.id or not 0.0 <= zone.consistency <= 1.0:
            logger.warning("Rejected referential zone '%s'", zone.id)
            return False
        self._zones[zone.id] = copy.deepcopy(zone)
        self._record("zone_added", zone.id)
        return True

    def remove_zone(self, zone_id: str) -> bool:
        if self._zones.pop(zone_id, None) is None:
            return False
        self._record("zone_removed", zone_id)
        return True

    def update_consistency(self, zone_id: str, consistency: float) -> bool:
        zone = self._zones.get(zone_id)
        if zone is None or not 0.0 <= consistency <= 1.0:
            return False
        zone.consistency = consistency
        self._record("consistency_updated", zone_id)
        return True

    def record_usage(self, zone_id: str, increment: float = 1.0) -> bool:
        zone = self._zones.get(zone_id)
        if zone is None:
            return False
        zone.usage_frequency = max(0.0, zone.usage_frequency + increment)
        self._record("usage_updated", zone_id)
        return True

    def establish_zone(self, zone_id: str) -> bool:
        zone = self._zones.get(zone_id)
        if zone is None:
            return False
        zone.established = True
        self._record("zone_established", zone_id)
        return True

    def register_placements(self, zones: list[str] | None) -> list[str]:
        """Establish and count a use of every locus inside the given space regions.

        Unknown region names are ignored. Returns the ids of the loci touched.
        """
        touched: list[str] = []
        for region in zones or []:
            for zone_id in ZONE_LOCI.get(region, []):
                if zone_id in touched or zone_id not in self._zones:
                    continue
                if not self._zones[zone_id].established:
                    self.establish_zone(zone_id)
                self.record_usage(zone_id)
                touched.append(zone_id)
        return touched

    def reduce_consistency(self, zone_ids: list[str], amount: float) -> int:
        """Lower consistency of the given zones, never below 0.1.

        Returns:
            Number of zones actually modified
        """
        modified = 0
        for zone_id in zone_ids:
            zone = self._zones.get(zone_id)
            if zone is not None:
                zone.consistency = max(0.1, zone.consistency - amount)
                modified += 1
        if modified:
            self._record("bulk_consistency_reduction", f"{modified}_zones")
        return modified

    def reset(self) -> None:
        self._zones.clear()
        self._history.clear()
        self._load_canonical_zones()
        self._record("zones_reset", "all")

    def _record(self, action: str, zone: str) -> None:
        self._history.append(ZoneHistoryEntry(action=action, zone=zone))
        if len(self._history) > self.history_limit:
            del self._history[0]
