"""
Pydantic Models for Fusion Service

This module defines the fusion output and the explainability structures
built from it.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

RiskLevel = Literal["low", "moderate", "high", "critical"]

MODALITIES = ("text", "audio", "facial")


class FusionModel(BaseModel):
    """Base for fusion value objects."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ModalityScores(FusionModel):
    """One number per modality; 0 for modalities that were not analyzed."""
    text: float = Field(default=0.0, ge=0.0, le=1.0)
    audio: float = Field(default=0.0, ge=0.0, le=1.0)
    facial: float = Field(default=0.0, ge=0.0, le=1.0)


class ActiveModalities(FusionModel):
    text: bool = False
    audio: bool = False
    facial: bool = False

    @property
    def count(self) -> int:
        return sum([self.text, self.audio, self.facial])

    @property
    def names(self) -> List[str]:
        return [name for name in MODALITIES if getattr(self, name)]


class FusionResult(FusionModel):
    """Fused risk assessment over the modalities that were analyzed."""
    overall_risk: float = Field(ge=0.0, le=1.0, alias="overallRisk")
    risk_level: RiskLevel = Field(alias="riskLevel")
    breakdown: ModalityScores
    weights: ModalityScores
    confidence: float = Field(ge=0.0, le=1.0)
    active_modalities: ActiveModalities = Field(alias="activeModalities")


class FeatureImportance(FusionModel):
    feature: str
    value: float = Field(ge=0.0, le=1.0)
    modality: str


class Counterfactual(FusionModel):
    """What the overall risk would have been under one changed input."""
    original: str
    change: str
    impact: int = Field(description="Change in overall risk, in points out of 100 (negative = lower)")
    resulting_level: RiskLevel = Field(alias="resultingLevel")


class Explanation(FusionModel):
    feature_importance: List[FeatureImportance] = Field(default_factory=list, alias="featureImportance")
    decision_path: List[str] = Field(default_factory=list, alias="decisionPath")
    counterfactuals: List[Counterfactual] = Field(default_factory=list)
    keyword_override: bool = Field(default=False, alias="keywordOverride")
    summary: Optional[str] = None
