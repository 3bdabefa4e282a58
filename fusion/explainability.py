"""
Explainability for Fusion Results

Builds feature importance, a decision path and counterfactuals from a
FusionResult (and the text indicators, when text was analyzed). Nothing here
changes the assessment; counterfactuals re-run the weighted sum with one
input changed.
"""

import logging
from typing import List, Optional

from analysis.models import TextIndicators
from fusion.fusion_logic import classify_risk, compute_text_risk, weighted_risk
from fusion.models import Counterfactual, Explanation, FeatureImportance, FusionResult, MODALITIES
from utils.scoring import clamp01

logger = logging.getLogger(__name__)

MODALITY_LABELS = {"text": "Text", "audio": "Audio", "facial": "Facial"}

EXTRACTION_STEPS = {
    "text": "Text scanned against risk lexicons and scored for sentiment -> stress, depression, anxiety",
    "audio": "Audio energy and zero-crossing rate measured -> energy, pitch, tempo",
    "facial": "Face regions measured for brightness, contrast and edges -> expression distribution"
}

COUNTERFACTUAL_TEXT = {
    "text": ("Negative language in text", "If the text carried no risk signal"),
    "audio": ("Stressed voice patterns", "If the voice showed no distress"),
    "facial": ("Negative facial expression", "If the expression showed no distress")
}


def _points(risk: float) -> int:
    return int(round(risk * 100))


def _feature_importance(fusion: FusionResult, text: Optional[TextIndicators]) -> List[FeatureImportance]:
    active = fusion.active_modalities
    features = []

    if active.text and text is not None:
        sentiment = text.sentiment
        features.extend([
            FeatureImportance(
                feature="Negative Sentiment Score",
                value=sentiment.score if sentiment.label == "NEGATIVE" else 0.1,
                modality="text"
            ),
            FeatureImportance(feature="Stress Indicators", value=text.emotions.stress, modality="text"),
            FeatureImportance(feature="Depression Keywords", value=text.emotions.depression, modality="text"),
            FeatureImportance(
                feature="Risk Phrases Detected",
                value=0.8 if text.risk_indicators else 0.1,
                modality="text"
            )
        ])
    if active.audio:
        features.append(FeatureImportance(feature="Voice Distress Level", value=fusion.breakdown.audio, modality="audio"))
    if active.facial:
        features.append(FeatureImportance(feature="Negative Facial Expression", value=fusion.breakdown.facial, modality="facial"))

    for name in active.names:
        contribution = getattr(fusion.breakdown, name) * getattr(fusion.weights, name)
        features.append(FeatureImportance(
            feature=f"{MODALITY_LABELS[name]} Weighted Contribution",
            value=clamp01(contribution),
            modality=name
        ))

    return sorted(features, key=lambda item: item.value, reverse=True)


def _counterfactuals(fusion: FusionResult, text: Optional[TextIndicators]) -> List[Counterfactual]:
    active = fusion.active_modalities
    high_risk_keywords = bool(text is not None and text.has_high_risk)
    counterfactuals = []

    for name in active.names:
        zeroed = fusion.breakdown.model_copy(update={name: 0.0})
        new_risk = weighted_risk(zeroed, fusion.weights)
        keeps_override = high_risk_keywords and name != "text"
        original, change = COUNTERFACTUAL_TEXT[name]
        counterfactuals.append(Counterfactual(
            original=original,
            change=change,
            impact=_points(new_risk) - _points(fusion.overall_risk),
            resulting_level=classify_risk(new_risk, keeps_override)
        ))

    if active.text and text is not None and text.risk_indicators:
        without_keywords = text.model_copy(update={"risk_indicators": ()})
        breakdown = fusion.breakdown.model_copy(update={"text": compute_text_risk(without_keywords)})
        new_risk = weighted_risk(breakdown, fusion.weights)
        counterfactuals.append(Counterfactual(
            original=f"Risk keywords present ({len(text.risk_indicators)})",
            change="If no risk keywords were detected",
            impact=_points(new_risk) - _points(fusion.overall_risk),
            resulting_level=classify_risk(new_risk, False)
        ))

    return counterfactuals


def explain_fusion(fusion: Optional[FusionResult], text: Optional[TextIndicators] = None) -> Optional[Explanation]:
    """
    Explain how a fusion result was reached.

    Args:
        fusion: Result from fuse_modalities(), or None
        text: Text indicators used for that result, if text was analyzed

    Returns:
        Explanation, or None if there is no fusion result
    """
    if fusion is None:
        return None

    active = fusion.active_modalities
    names = active.names
    labels = [MODALITY_LABELS[name] for name in names]

    # Override applies when keywords, not the score, made it critical
    keyword_override = bool(
        text is not None
        and text.has_high_risk
        and classify_risk(fusion.overall_risk, False) != "critical"
    )

    noun = "modality" if len(names) == 1 else "modalities"
    decision_path = [f"Input received from {len(names)} {noun}: {', '.join(labels)}"]
    decision_path.extend(EXTRACTION_STEPS[name] for name in names)
    if len(names) > 1:
        weight_text = ", ".join(f"{name}={getattr(fusion.weights, name):.2f}" for name in MODALITIES if getattr(active, name))
        decision_path.append(f"Cross-modal fusion computed with weights {weight_text}")
    decision_path.append(f"Risk score calculated: {_points(fusion.overall_risk)}/100")
    if keyword_override:
        decision_path.append("High-risk keyword detected: classification forced to CRITICAL")
    decision_path.append(f"Final classification: {fusion.risk_level.upper()} risk")

    summary = (
        f"{fusion.risk_level.upper()} risk ({_points(fusion.overall_risk)}/100) from "
        f"{', '.join(labels)}; confidence {_points(fusion.confidence)}%"
    )

    return Explanation(
        feature_importance=_feature_importance(fusion, text),
        decision_path=decision_path,
        counterfactuals=_counterfactuals(fusion, text),
        keyword_override=keyword_override,
        summary=summary
    )
