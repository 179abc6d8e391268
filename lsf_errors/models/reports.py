"""Analysis report schemas attached to content records or returned by helpers."""

from typing import Any, Literal

from pydantic import BaseModel, Field

LinguisticImpact = Literal["minimal", "moderate", "severe", "critical"]


class ParameterAnalysis(BaseModel):
    """Diagnostic report for a single manual or non-manual parameter."""

    category: str
    value: str | None = None
    accuracy: float
    difficulty: str | None = None
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    metrics: dict[str, Any] = Field(default_factory=dict)


class RhythmAnalysis(BaseModel):
    overall_score: float
    tempo: str
    fluidity_level: str
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    metrics: dict[str, float | None] = Field(default_factory=dict)
    diagnosis: str


class ContextCompatibility(BaseModel):
    compatibility: float
    appropriateness: str
    suggestions: list[str] = Field(default_factory=list)


class SyntaxAnalysis(BaseModel):
    """Report attached to ``content["syntax_analysis"]`` after a sequence mutation."""

    original_order: list[str]
    modified_order: list[str]
    error_type: str
    success: bool
    linguistic_impact: LinguisticImpact
    comprehensibility_score: float
    suggestions: list[str] = Field(default_factory=list)


class SyntaxComplexity(BaseModel):
    base_complexity: float
    structural_elements: list[str] = Field(default_factory=list)
    interference_level: float
    adaptation_recommendations: list[str] = Field(default_factory=list)


class SyntaxValidation(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    quality: float
    suggestions: list[str] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    success: bool
    modifications_count: int
    modifications: list[str] = Field(default_factory=list)


class ManipulationResult(BaseModel):
    """Outcome of a reference manipulation; failure is a normal result."""

    success: bool
    accuracy_impact: float = 0.0
    affected_zones: list[str] = Field(default_factory=list)
    error_message: str | None = None


class SpatialAnalysis(BaseModel):
    """Report attached to ``content["spatial_analysis"]``."""

    transformation_type: str
    strategy: str
    fallback_applied: bool
    accuracy_before: float
    accuracy_after: float
    impact_score: float
    coherence_score: float
    spatial_complexity: float
    semantic_density: float
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
