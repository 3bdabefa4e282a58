"""
Recommendation Engine

This module selects recommendations by risk level. Crisis and professional
help come first for high and critical risk; therapist and support network
for moderate and high risk; self-care, sleep, exercise and mindfulness are
always included.
"""

from typing import List, Optional
import logging

from fusion.models import FusionResult
from intervention.config_loader import load_config
from intervention.models import Recommendation

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_recommendation_config = _config.get("recommendation_engine", {})

CRISIS_LINE = Recommendation(
    id="crisis-line",
    category="immediate",
    title="Contact Crisis Helpline",
    description=_recommendation_config.get(
        "crisis_line_description",
        "National Suicide Prevention Lifeline: 988 (US) or local emergency services"
    ),
    icon="📞"
)

PROFESSIONAL_HELP = Recommendation(
    id="professional",
    category="immediate",
    title="Seek Professional Help",
    description="Schedule an appointment with a mental health professional immediately",
    icon="👨‍⚕️"
)

THERAPIST = Recommendation(
    id="therapist",
    category="short-term",
    title="Connect with a Therapist",
    description="Consider speaking with a licensed therapist about your feelings",
    icon="🧠"
)

SUPPORT_NETWORK = Recommendation(
    id="support",
    category="short-term",
    title="Reach Out to Support Network",
    description="Talk to trusted friends, family, or support groups",
    icon="👥"
)

STANDING_RECOMMENDATIONS = [
    Recommendation(
        id="self-care",
        category="short-term",
        title="Practice Self-Care",
        description="Engage in activities that promote relaxation and well-being",
        icon="🧘"
    ),
    Recommendation(
        id="sleep",
        category="long-term",
        title="Improve Sleep Hygiene",
        description="Maintain regular sleep schedule and create a restful environment",
        icon="😴"
    ),
    Recommendation(
        id="exercise",
        category="long-term",
        title="Regular Physical Activity",
        description="Exercise has proven benefits for mental health",
        icon="🏃"
    ),
    Recommendation(
        id="mindfulness",
        category="long-term",
        title="Mindfulness & Meditation",
        description="Practice daily mindfulness exercises to reduce stress",
        icon="🧘‍♀️"
    )
]


def generate_recommendations(fusion: Optional[FusionResult]) -> List[Recommendation]:
    """
    Recommend next steps for a fusion result.

    Args:
        fusion: Result from fuse_modalities(), or None

    Returns:
        Recommendations (empty if there is no fusion result)
    """
    if fusion is None:
        return []

    level = fusion.risk_level
    recommendations = []

    if level in ("critical", "high"):
        recommendations.extend([CRISIS_LINE, PROFESSIONAL_HELP])

    if level in ("moderate", "high"):
        recommendations.extend([THERAPIST, SUPPORT_NETWORK])

    recommendations.extend(STANDING_RECOMMENDATIONS)

    logger.debug(f"Recommendations for {level} risk: {[rec.id for rec in recommendations]}")
    return recommendations
