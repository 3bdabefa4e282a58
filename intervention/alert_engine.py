"""
Alert Engine

This module turns a fusion result into a prioritized list of alerts. Rules
are evaluated independently, so several alerts can fire together.
"""

from typing import List, Optional, Sequence
import logging

from fusion.models import FusionResult
from intervention.config_loader import load_config
from intervention.models import Alert

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_alert_config = _config.get("alert_engine", {})
_threshold_config = _alert_config.get("modality_thresholds", {})

# An active modality whose breakdown exceeds its threshold gets its own alert
MODALITY_THRESHOLDS = {
    "text": _threshold_config.get("text", 0.5),
    "audio": _threshold_config.get("audio", 0.5),
    "facial": _threshold_config.get("facial", 0.4)
}
CRISIS_ACTION = _alert_config.get("crisis_action", "Contact crisis intervention team immediately")
HIGH_RISK_ACTION = _alert_config.get("high_risk_action", "Schedule urgent professional consultation")

MODALITY_ALERTS = {
    "text": ("text-risk", "Concerning Language Patterns",
             "Text analysis reveals negative sentiment and stress indicators."),
    "audio": ("audio-risk", "Voice Stress Indicators",
              "Audio analysis shows signs of emotional distress."),
    "facial": ("facial-risk", "Negative Facial Expressions",
               "Facial analysis indicates distressed emotional state.")
}


def has_high_risk_indicator(risk_indicators: Optional[Sequence[str]]) -> bool:
    return any(indicator.startswith("HIGH") for indicator in risk_indicators or [])


def generate_alerts(fusion: Optional[FusionResult], risk_indicators: Optional[Sequence[str]] = None) -> List[Alert]:
    """
    Generate alerts for a fusion result.

    Args:
        fusion: Result from fuse_modalities(), or None
        risk_indicators: Text risk indicators, if text was analyzed

    Returns:
        Alerts in priority order: crisis, high risk, per-modality, overall status
    """
    alerts = []
    if fusion is None:
        return alerts

    active = fusion.active_modalities

    if has_high_risk_indicator(risk_indicators) or fusion.risk_level == "critical":
        alerts.append(Alert(
            id="crisis",
            level="critical",
            title="CRISIS ALERT",
            message="High-risk indicators detected suggesting potential crisis situation.",
            action=CRISIS_ACTION
        ))

    if fusion.risk_level == "high":
        alerts.append(Alert(
            id="high-risk",
            level="high",
            title="High Risk Detected",
            message="Multiple indicators suggest elevated mental health risk.",
            action=HIGH_RISK_ACTION
        ))

    # Only for modalities that were actually analyzed
    for name in active.names:
        score = getattr(fusion.breakdown, name)
        if score > MODALITY_THRESHOLDS[name]:
            alert_id, title, message = MODALITY_ALERTS[name]
            alerts.append(Alert(id=alert_id, level="medium", title=title, message=message))

    if fusion.risk_level == "low":
        alerts.append(Alert(
            id="stable",
            level="info",
            title="Stable Status",
            message="No immediate concerns detected. Continue regular monitoring."
        ))

    if fusion.risk_level == "moderate":
        alerts.append(Alert(
            id="moderate",
            level="medium",
            title="Moderate Risk",
            message="Some indicators suggest mild to moderate mental health concern."
        ))

    logger.info(f"Generated {len(alerts)} alerts: {[alert.id for alert in alerts]}")
    return alerts
