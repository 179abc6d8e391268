"""
Pydantic models for learning concepts and their resources.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

ResourceType = Literal["video", "article", "exercise", "quiz", "interactive"]
ResourceLevel = Literal["beginner", "intermediate", "advanced"]


class ConceptResource(BaseModel):
    """A learning resource attached to a concept."""
    id: str
    title: str
    type: ResourceType
    difficulty: int = Field(..., ge=1, le=5, description="Difficulty from 1 to 5")
    level: ResourceLevel
    url: str | None = None
    duration: int | None = Field(default=None, description="Estimated duration in seconds")
    description: str | None = None
    tags: list[str] = Field(default_factory=list)


class Concept(BaseModel):
    """A learning concept (handshape, spatial reference, ...)."""
    id: str
    name: str
    description: str
    category: str
    complexity: int = Field(..., ge=1, le=10)
    importance: int = Field(..., ge=1, le=10)
    prerequisites: list[str] = Field(default_factory=list)
    derivatives: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ConceptFilter(BaseModel):
    """Search options for concepts. Every field is optional."""
    keywords: str | None = Field(default=None, description="Whitespace separated, matched on name or description")
    category: str | None = None
    min_complexity: int | None = None
    max_complexity: int | None = None
    min_importance: int | None = None
    tags: list[str] = Field(default_factory=list, description="Match any")
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)
