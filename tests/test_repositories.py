"""Tests for the in-memory concept repository."""

import pytest
from pydantic import ValidationError

from lsf_errors.models.concept import Concept, ConceptFilter, ConceptResource
from lsf_errors.repositories.concept_repo import ConceptRepository, InMemoryConceptRepository


@pytest.fixture
def repo():
    return InMemoryConceptRepository(seed=True)


def _ids(concepts):
    return [c.id for c in concepts]


def _concept(concept_id, **overrides):
    data = {
        "id": concept_id,
        "name": concept_id,
        "description": "test concept",
        "category": "test",
        "complexity": 3,
        "importance": 3,
    }
    data.update(overrides)
    return Concept(**data)


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


async def test_seeded_concepts(repo):
    concepts = await repo.get_all_concepts()
    assert len(concepts) == 8
    concept = await repo.get_concept_by_id("concept_spatial_reference")
    assert concept.complexity == 8
    assert concept.importance == 9
    assert await repo.get_concept_by_id("concept_unknown") is None


async def test_empty_repository():
    repo = InMemoryConceptRepository()
    assert await repo.get_all_concepts() == []
    assert isinstance(repo, ConceptRepository)


def test_duplicate_concept_is_rejected(repo):
    assert not repo.add_concept(_concept("concept_handshape"))


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


async def test_keyword_search(repo):
    results = await repo.search_concepts(ConceptFilter(keywords="SPACE"))
    assert _ids(results) == ["concept_movement", "concept_spatial_reference"]


async def test_filter_by_category_and_ranges(repo):
    assert len(await repo.search_concepts(ConceptFilter(category="grammar"))) == 3
    assert _ids(await repo.search_concepts(ConceptFilter(min_complexity=8))) == [
        "concept_spatial_reference",
        "concept_classifiers",
        "concept_role_shifting",
    ]
    assert _ids(await repo.search_concepts(ConceptFilter(max_complexity=4))) == ["concept_location"]
    assert _ids(await repo.search_concepts(ConceptFilter(min_importance=9))) == [
        "concept_handshape",
        "concept_spatial_reference",
    ]


async def test_tags_match_any(repo):
    results = await repo.search_concepts(ConceptFilter(tags=["facial", "role"]))
    assert _ids(results) == ["concept_non_manual_markers", "concept_role_shifting"]


async def test_offset_and_limit(repo):
    results = await repo.search_concepts(ConceptFilter(offset=2, limit=3))
    assert _ids(results) == ["concept_location", "concept_orientation", "concept_spatial_reference"]


def test_filter_rejects_negative_limit():
    with pytest.raises(ValidationError):
        ConceptFilter(limit=-1)


# ---------------------------------------------------------------------------
# Resources and prerequisites
# ---------------------------------------------------------------------------


async def test_resources(repo):
    resources = await repo.get_concept_resources("concept_handshape")
    assert [r.id for r in resources] == ["res_handshape_1", "res_handshape_2"]
    resources.clear()
    assert len(await repo.get_concept_resources("concept_handshape")) == 2
    assert len(await repo.get_concept_resources("concept_spatial_reference")) == 3
    assert await repo.get_concept_resources("concept_orientation") == []


def test_resources_need_a_known_concept(repo):
    resource = ConceptResource(id="r", title="Quiz", type="quiz", difficulty=1, level="beginner")
    assert not repo.add_resources("concept_unknown", [resource])
    with pytest.raises(ValidationError):
        ConceptResource(id="r", title="Quiz", type="podcast", difficulty=1, level="beginner")


async def test_prerequisites(repo):
    prerequisites = await repo.get_prerequisite_concepts("concept_role_shifting")
    assert _ids(prerequisites) == ["concept_spatial_reference", "concept_non_manual_markers"]
    assert await repo.get_prerequisite_concepts("concept_handshape") == []
    assert await repo.get_prerequisite_concepts("concept_unknown") == []


async def test_unknown_prerequisites_are_skipped(repo):
    repo.add_concept(_concept("concept_poetry", prerequisites=["concept_role_shifting", "concept_missing"]))
    assert _ids(await repo.get_prerequisite_concepts("concept_poetry")) == ["concept_role_shifting"]
