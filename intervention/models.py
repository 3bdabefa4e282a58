"""
Pydantic Models for Intervention Service

This module defines the alerts and recommendations generated from a fusion
result.
"""

from pydantic import BaseModel, ConfigDict
from typing import List, Literal, Optional

AlertLevel = Literal["critical", "high", "medium", "info"]
RecommendationCategory = Literal["immediate", "short-term", "long-term"]


class Alert(BaseModel):
    """Prioritized alert for the presentation layer."""
    model_config = ConfigDict(frozen=True)

    id: str
    level: AlertLevel
    title: str
    message: str
    action: Optional[str] = None


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    category: RecommendationCategory
    title: str
    description: str
    icon: str


class InterventionReport(BaseModel):
    """Alerts and recommendations for one fusion result."""
    model_config = ConfigDict(frozen=True)

    alerts: List[Alert]
    recommendations: List[Recommendation]
