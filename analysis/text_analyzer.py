"""
Text Indicator Extractor

This module scans free text against the severity lexicons and combines the
lexicon hits with a sentiment judgment into stress, depression, anxiety and
positivity scores.
"""

import logging
from typing import List, Optional, Tuple

from analysis.config_loader import load_config
from analysis.models import TextEmotions, TextIndicators
from analysis.sentiment_client import BaseSentimentClassifier, classify_with_fallback
from utils.scoring import clamp01

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_keyword_config = _config.get("risk_keywords", {})
RISK_KEYWORDS = {
    "high": _keyword_config.get("high", []),
    "medium": _keyword_config.get("medium", []),
    "low": _keyword_config.get("low", [])
}
POSITIVE_KEYWORDS = _config.get("positive_keywords", [])

# Severity tag and weight per lexicon, in scan order
SEVERITY_LEVELS = [
    ("high", "HIGH RISK", 3),
    ("medium", "MEDIUM", 2),
    ("low", "LOW", 1)
]

POSITIVITY_BOOST_PER_HIT = 0.1
MAX_KEYWORDS = 5
MIN_KEYWORD_LENGTH = 5


def scan_risk_lexicons(lower_text: str) -> Tuple[List[str], int]:
    """
    Find lexicon hits in lower-cased text.

    Returns:
        Tuple of (risk_indicators, risk_level) where risk_level is the sum of
        the severity weights of every hit
    """
    risk_indicators = []
    risk_level = 0

    for lexicon, tag, weight in SEVERITY_LEVELS:
        for keyword in RISK_KEYWORDS[lexicon]:
            if keyword in lower_text:
                risk_indicators.append(f'{tag}: "{keyword}"')
                risk_level += weight

    return risk_indicators, risk_level


def positivity_boost(lower_text: str) -> float:
    hits = sum(1 for keyword in POSITIVE_KEYWORDS if keyword in lower_text)
    return hits * POSITIVITY_BOOST_PER_HIT


def extract_keywords(text: str) -> List[str]:
    """First distinct whitespace-delimited tokens longer than four characters."""
    words = [word for word in text.split() if len(word) >= MIN_KEYWORD_LENGTH]
    return list(dict.fromkeys(words))[:MAX_KEYWORDS]


async def analyze_text(
    text: Optional[str],
    classifier: Optional[BaseSentimentClassifier] = None,
    timeout_seconds: Optional[float] = None
) -> TextIndicators:
    """
    Extract mental-health indicators from text.

    Algorithm:
    1. Scan the lower-cased text against the high/medium/low lexicons
    2. Count positive keyword hits
    3. Get a sentiment judgment (neutral default if unavailable)
    4. Combine lexicon weight and negativity into emotion scores
    5. Pick the first five distinct long tokens as keywords

    Args:
        text: Free text to analyze
        classifier: Optional sentiment classifier capability
        timeout_seconds: Optional override for the classifier timeout

    Returns:
        TextIndicators with scores clamped to [0, 1]
    """
    if text is None:
        logger.warning("analyze_text called with None, treating as empty text")
        text = ""

    lower_text = text.lower()

    # Step 1-2: Lexicon scan
    risk_indicators, risk_level = scan_risk_lexicons(lower_text)
    boost = positivity_boost(lower_text)

    if risk_indicators:
        logger.info(f"Text risk indicators: {risk_indicators} (risk level {risk_level})")

    # Step 3: Sentiment
    sentiment = await classify_with_fallback(classifier, text, timeout_seconds)
    negativity = sentiment.negativity

    # Step 4: Emotion scores
    emotions = TextEmotions(
        stress=clamp01(min(1.0, risk_level * 0.10 + negativity * 0.40)),
        depression=clamp01(min(1.0, risk_level * 0.12 + negativity * 0.35)),
        anxiety=clamp01(min(1.0, risk_level * 0.08 + negativity * 0.30)),
        positivity=clamp01((1 - negativity) * 0.70 + boost)
    )

    logger.debug(
        f"Text emotions: stress={emotions.stress:.3f}, depression={emotions.depression:.3f}, "
        f"anxiety={emotions.anxiety:.3f}, positivity={emotions.positivity:.3f}"
    )

    # Step 5: Keywords
    keywords = extract_keywords(text)

    return TextIndicators(
        sentiment=sentiment,
        emotions=emotions,
        keywords=keywords,
        risk_indicators=risk_indicators
    )
