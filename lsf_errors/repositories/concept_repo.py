"""Read-only repository for learning concepts and their resources."""

import logging
from typing import Protocol, runtime_checkable

from lsf_errors.models.concept import Concept, ConceptFilter, ConceptResource

logger = logging.getLogger(__name__)


@runtime_checkable
class ConceptRepository(Protocol):
    async def get_concept_by_id(self, concept_id: str) -> Concept | None: ...

    async def search_concepts(self, options: ConceptFilter) -> list[Concept]: ...

    async def get_concept_resources(self, concept_id: str) -> list[ConceptResource]: ...

    async def get_prerequisite_concepts(self, concept_id: str) -> list[Concept]: ...


class InMemoryConceptRepository:
    """Dict-backed ``ConceptRepository``."""

    def __init__(self, seed: bool = False):
        self._concepts: dict[str, Concept] = {}
        self._resources: dict[str, list[ConceptResource]] = {}
        if seed:
            seed_default_concepts(self)

    def add_concept(self, concept: Concept) -> bool:
        if concept.id in self._concepts:
            logger.warning("Concept %s already exists", concept.id)
            return False
        self._concepts[concept.id] = concept
        return True

    def add_resources(self, concept_id: str, resources: list[ConceptResource]) -> bool:
        if concept_id not in self._concepts:
            logger.warning("Cannot add resources: concept %s not found", concept_id)
            return False
        self._resources.setdefault(concept_id, []).extend(resources)
        return True

    async def get_concept_by_id(self, concept_id: str) -> Concept | None:
        return self._concepts.get(concept_id)

    async def get_all_concepts(self) -> list[Concept]:
        return list(self._concepts.values())

    async def search_concepts(self, options: ConceptFilter) -> list[Concept]:
        """Filter concepts, then apply offset and limit in insertion order."""
        results = list(self._concepts.values())

        if options.keywords:
            keywords = options.keywords.lower().split()
            results = [
                c for c in results
                if any(k in c.name.lower() or k in c.description.lower() for k in keywords)
            ]
        if options.category:
            results = [c for c in results if c.category == options.category]
        if options.min_complexity is not None:
            results = [c for c in results if c.complexity >= options.min_complexity]
        if options.max_complexity is not None:
            results = [c for c in results if c.complexity <= options.max_complexity]
        if options.min_importance is not None:
            results = [c for c in results if c.importance >= options.min_importance]
        if options.tags:
            results = [c for c in results if any(tag in c.tags for tag in options.tags)]

        if options.offset is not None:
            results = results[options.offset:]
        if options.limit is not None:
            results = results[:options.limit]
        return results

    async def get_concept_resources(self, concept_id: str) -> list[ConceptResource]:
        return list(self._resources.get(concept_id, []))

    async def get_prerequisite_concepts(self, concept_id: str) -> list[Concept]:
        concept = self._concepts.get(concept_id)
        if concept is None:
            return []
        # unknown prerequisite ids are skipped
        return [self._concepts[p] for p in concept.prerequisites if p in self._concepts]


def seed_default_concepts(repo: InMemoryConceptRepository) -> None:
    """Load the core LSF phonology and grammar concepts."""
    concepts = [
        Concept(
            id="concept_handshape", name="Configuration manuelle",
            description="Hand shapes and finger positions used to form signs",
            category="phonology", complexity=6, importance=9,
            tags=["phonology", "basic", "handshape"],
        ),
        Concept(
            id="concept_movement", name="Mouvement",
            description="Hand and arm movements through the signing space",
            category="phonology", complexity=5, importance=8,
            tags=["phonology", "basic", "movement"],
        ),
        Concept(
            id="concept_location", name="Emplacement",
            description="Where a sign is produced relative to the body",
            category="phonology", complexity=4, importance=7,
            tags=["phonology", "basic", "location"],
        ),
        Concept(
            id="concept_orientation", name="Orientation",
            description="Direction the palms face while signing",
            category="phonology", complexity=5, importance=7,
            tags=["phonology", "basic", "orientation"],
        ),
        Concept(
            id="concept_spatial_reference", name="Référence spatiale",
            description="Using the signing space to refer to people or objects",
            category="grammar", complexity=8, importance=9,
            prerequisites=["concept_location", "concept_movement"],
            tags=["grammar", "advanced", "spatial"],
        ),
        Concept(
            id="concept_non_manual_markers", name="Marqueurs non manuels",
            description="Facial expressions and body movements that modify meaning",
            category="grammar", complexity=7, importance=8,
            tags=["grammar", "intermediate", "facial"],
        ),
        Concept(
            id="concept_classifiers", name="Classificateurs",
            description="Hand shapes standing for categories of objects",
            category="grammar", complexity=9, importance=8,
            prerequisites=["concept_handshape", "concept_movement"],
            tags=["grammar", "advanced", "classifiers"],
        ),
        Concept(
            id="concept_role_shifting", name="Transfert personnel",
            description="Taking on the role of different people in a narration",
            category="discourse", complexity=8, importance=7,
            prerequisites=["concept_spatial_reference", "concept_non_manual_markers"],
            tags=["discourse", "advanced", "role"],
        ),
    ]
    for concept in concepts:
        repo.add_concept(concept)

    repo.add_resources("concept_handshape", [
        ConceptResource(
            id="res_handshape_1", title="Basic hand configurations", type="video",
            difficulty=2, level="beginner", duration=480, tags=["handshape", "tutorial"],
        ),
        ConceptResource(
            id="res_handshape_2", title="Hand configuration drills", type="exercise",
            difficulty=3, level="beginner", duration=900, tags=["handshape", "practice"],
        ),
    ])
    repo.add_resources("concept_movement", [
        ConceptResource(
            id="res_movement_1", title="Movement types in LSF", type="video",
            difficulty=2, level="beginner", duration=420, tags=["movement", "tutorial"],
        ),
    ])
    repo.add_resources("concept_spatial_reference", [
        ConceptResource(
            id="res_spatial_1", title="The signing space", type="video",
            difficulty=4, level="intermediate", duration=540, tags=["spatial", "tutorial"],
        ),
        ConceptResource(
            id="res_spatial_2", title="Spatial reference workshop", type="interactive",
            difficulty=5, level="intermediate", duration=1200, tags=["spatial", "workshop"],
        ),
        ConceptResource(
            id="res_spatial_3", title="Spatial reference quiz", type="quiz",
            difficulty=4, level="intermediate", duration=300, tags=["spatial", "assessment"],
        ),
    ])
    logger.debug("Seeded %d concepts", len(concepts))
