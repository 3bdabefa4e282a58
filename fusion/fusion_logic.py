"""
Core Fusion Logic for Fusion Service

This module implements the dynamic multi-modality fusion algorithm that
combines whichever of the text, audio and facial indicators are present
into one risk score, risk level and confidence.
"""

import logging
from typing import Dict, Optional, Tuple

from analysis.models import AudioIndicators, ImageIndicators, TextIndicators
from fusion.config_loader import load_config
from fusion.models import ActiveModalities, FusionResult, ModalityScores, MODALITIES
from utils.scoring import clamp01

logger = logging.getLogger(__name__)

# Modality presence bits
TEXT = 1
AUDIO = 2
FACIAL = 4
_MODALITY_BITS = {"text": TEXT, "audio": AUDIO, "facial": FACIAL}

WeightRow = Tuple[float, float, float]


def build_weight_table(rows: Dict[str, Dict[str, float]]) -> Dict[int, WeightRow]:
    """
    Turn config weight rows into a presence-bitmask -> (text, audio, facial) table.

    Every modality named in the row key needs a weight; entries for other
    modalities are ignored. Weights are renormalized to sum to 1. Rows that
    cannot be used are skipped, so fuse_modalities() falls back to an equal
    split for that combination.
    """
    table = {}
    for key, row in rows.items():
        names = key.split("+")
        unknown = [name for name in names if name not in _MODALITY_BITS]
        if unknown:
            logger.error(f"Unknown modality {unknown} in weight row '{key}', skipping row")
            continue

        missing = [name for name in names if name not in row]
        if missing:
            logger.error(f"Weight row '{key}' has no weight for {missing}, skipping row")
            continue

        ignored = [name for name in row if name not in names]
        if ignored:
            logger.warning(f"Weight row '{key}' ignores weights for inactive modalities {ignored}")

        weights = {name: clamp01(row[name]) for name in names}
        total = sum(weights.values())
        if total <= 0:
            logger.error(f"Weight row '{key}' sums to 0, skipping row")
            continue
        if abs(total - 1.0) > 1e-6:
            logger.warning(f"Weight row '{key}' sums to {total:.3f}, renormalizing")

        mask = 0
        for name in names:
            mask |= _MODALITY_BITS[name]
        table[mask] = tuple(weights[name] / total if name in weights else 0.0 for name in MODALITIES)
    return table


# Load configuration
_config = load_config()
WEIGHT_TABLE = build_weight_table(_config.get("modality_weights", {}))
_thresholds = _config.get("risk_thresholds", {})
RISK_THRESHOLDS = {
    "moderate": _thresholds.get("moderate", 0.35),
    "high": _thresholds.get("high", 0.6),
    "critical": _thresholds.get("critical", 0.8)
}
_confidence_config = _config.get("confidence_by_modality_count", {})
CONFIDENCE_BY_MODALITY_COUNT = {
    1: _confidence_config.get("1", 0.65),
    2: _confidence_config.get("2", 0.80),
    3: _confidence_config.get("3", 0.92)
}
KEYWORD_BOOST_PER_INDICATOR = _config.get("keyword_boost_per_indicator", 0.15)


def compute_text_risk(text: TextIndicators) -> float:
    emotions = text.emotions
    sentiment = text.sentiment
    neg_score = sentiment.score if sentiment.label == "NEGATIVE" else (1 - sentiment.score) * 0.5

    risk = emotions.stress * 0.3 + emotions.depression * 0.3 + emotions.anxiety * 0.2 + neg_score * 0.2
    if text.risk_indicators:
        risk = min(1.0, risk + len(text.risk_indicators) * KEYWORD_BOOST_PER_INDICATOR)
    return clamp01(risk)


def compute_audio_risk(audio: AudioIndicators) -> float:
    emotions = audio.emotions
    risk = emotions.stressed * 0.35 + emotions.sad * 0.30 + emotions.anxious * 0.25 + (1 - emotions.calm) * 0.10
    return clamp01(risk)


def compute_facial_risk(image: ImageIndicators) -> float:
    expressions = image.expressions
    risk = (
        expressions.sad * 0.3
        + expressions.angry * 0.2
        + expressions.fearful * 0.25
        + expressions.disgusted * 0.1
        + (1 - expressions.happy) * 0.15
    )
    return clamp01(risk)


def classify_risk(overall_risk: float, high_risk_keywords: bool = False) -> str:
    """
    Map a fused risk score onto a risk level.

    A high-severity keyword hit forces 'critical' regardless of the score.
    """
    if high_risk_keywords or overall_risk >= RISK_THRESHOLDS["critical"]:
        return "critical"
    if overall_risk >= RISK_THRESHOLDS["high"]:
        return "high"
    if overall_risk >= RISK_THRESHOLDS["moderate"]:
        return "moderate"
    return "low"


def presence_mask(active: ActiveModalities) -> int:
    return (TEXT if active.text else 0) | (AUDIO if active.audio else 0) | (FACIAL if active.facial else 0)


def weighted_risk(breakdown: ModalityScores, weights: ModalityScores) -> float:
    """Clamped weighted sum of per-modality risks."""
    total = sum(getattr(breakdown, name) * getattr(weights, name) for name in MODALITIES)
    return clamp01(total)


def fuse_modalities(
    text: Optional[TextIndicators] = None,
    audio: Optional[AudioIndicators] = None,
    image: Optional[ImageIndicators] = None,
    weight_table: Optional[Dict[int, WeightRow]] = None
) -> Optional[FusionResult]:
    """
    Fuse the modalities that are present into one risk assessment.

    Algorithm:
    1. Work out which modalities are present (None = not analyzed)
    2. Compute a risk score for each present modality
    3. Look up the weight row for that set of modalities
    4. Weighted sum, clamped to [0, 1]
    5. Classify, with the high-risk keyword override
    6. Confidence from the number of modalities

    Args:
        text: Text indicators, or None
        audio: Audio indicators, or None
        image: Image indicators, or None
        weight_table: Optional bitmask -> weights table. If None, uses config weights.

    Returns:
        FusionResult, or None if no modality is present
    """
    table = weight_table if weight_table is not None else WEIGHT_TABLE

    # Step 1: Presence
    active = ActiveModalities(text=text is not None, audio=audio is not None, facial=image is not None)
    if active.count == 0:
        logger.debug("No modalities present, nothing to fuse")
        return None

    # Step 2: Per-modality risk (0 for absent modalities)
    breakdown = ModalityScores(
        text=compute_text_risk(text) if active.text else 0.0,
        audio=compute_audio_risk(audio) if active.audio else 0.0,
        facial=compute_facial_risk(image) if active.facial else 0.0
    )

    # Step 3: Weights for this combination
    mask = presence_mask(active)
    row = table.get(mask)
    if row is None:
        # Equal split if the table has no row for this combination
        logger.error(f"No weight row for modalities {active.names}, splitting equally")
        share = 1.0 / active.count
        row = tuple(share if getattr(active, name) else 0.0 for name in MODALITIES)
    weights = ModalityScores(text=row[0], audio=row[1], facial=row[2])

    # Step 4: Weighted sum
    overall_risk = weighted_risk(breakdown, weights)

    # Step 5: Classification
    high_risk_keywords = bool(text is not None and text.has_high_risk)
    risk_level = classify_risk(overall_risk, high_risk_keywords)
    if high_risk_keywords:
        logger.warning("High-risk keyword detected in text, risk level forced to critical")

    # Step 6: Confidence
    confidence = CONFIDENCE_BY_MODALITY_COUNT.get(active.count, 0.65)

    logger.info(
        f"Fused risk over {active.names}: {overall_risk:.3f} ({risk_level}), "
        f"breakdown={breakdown.model_dump()}, weights={weights.model_dump()}, confidence={confidence:.2f}"
    )

    return FusionResult(
        overall_risk=overall_risk,
        risk_level=risk_level,
        breakdown=breakdown,
        weights=weights,
        confidence=confidence,
        active_modalities=active
    )
