"""
Intervention Report Builder

Combines the alert engine and the recommendation engine into one report
for a fusion result.
"""

from typing import Optional
import logging

from analysis.models import TextIndicators
from fusion.models import FusionResult
from intervention.alert_engine import generate_alerts
from intervention.recommendation_engine import generate_recommendations
from intervention.models import InterventionReport

logger = logging.getLogger(__name__)


def build_intervention(
    fusion: Optional[FusionResult],
    text_indicators: Optional[TextIndicators] = None
) -> InterventionReport:
    """
    Build alerts and recommendations for a fusion result.

    Args:
        fusion: Result from fuse_modalities(), or None
        text_indicators: Text indicators, if text was analyzed (their risk
                         indicators can raise a crisis alert on their own)

    Returns:
        InterventionReport; empty lists if there is no fusion result
    """
    if fusion is None:
        logger.debug("No fusion result, empty intervention report")
        return InterventionReport(alerts=[], recommendations=[])

    risk_indicators = text_indicators.risk_indicators if text_indicators is not None else None

    return InterventionReport(
        alerts=generate_alerts(fusion, risk_indicators),
        recommendations=generate_recommendations(fusion)
    )
