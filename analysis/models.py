"""
Pydantic Models for Analysis Service

This module defines the per-modality indicator structures produced by the
text, audio and image extractors. All models are immutable once built and
serialize with camelCase keys when dumped with by_alias=True.
"""

import math
from typing import Iterator, List, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

# Fixed enumeration order; ties on the dominant expression go to the earlier key
EXPRESSION_NAMES = ["neutral", "happy", "sad", "angry", "fearful", "disgusted", "surprised"]

SentimentLabel = Literal["POSITIVE", "NEGATIVE", "NEUTRAL"]


class IndicatorModel(BaseModel):
    """Base for indicator value objects."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class SentimentResult(IndicatorModel):
    """Binary sentiment judgment from the sentiment classifier."""
    label: SentimentLabel = "NEUTRAL"
    score: float = Field(default=0.5, ge=0.0, le=1.0, description="Classifier confidence for the label")

    @property
    def negativity(self) -> float:
        """Score if the label is NEGATIVE, otherwise its complement."""
        return self.score if self.label == "NEGATIVE" else 1.0 - self.score


class TextEmotions(IndicatorModel):
    stress: float = Field(ge=0.0, le=1.0)
    depression: float = Field(ge=0.0, le=1.0)
    anxiety: float = Field(ge=0.0, le=1.0)
    positivity: float = Field(ge=0.0, le=1.0)


class TextIndicators(IndicatorModel):
    """Indicators extracted from free text."""
    sentiment: SentimentResult
    emotions: TextEmotions
    keywords: Tuple[str, ...] = Field(default=(), max_length=5)
    risk_indicators: Tuple[str, ...] = Field(default=(), alias="riskIndicators")

    @property
    def has_high_risk(self) -> bool:
        """True if any lexicon hit came from the high-severity list."""
        return any(indicator.startswith("HIGH") for indicator in self.risk_indicators)


class AudioEmotions(IndicatorModel):
    calm: float = Field(ge=0.0, le=1.0)
    stressed: float = Field(ge=0.0, le=1.0)
    sad: float = Field(ge=0.0, le=1.0)
    anxious: float = Field(ge=0.0, le=1.0)


class AudioIndicators(IndicatorModel):
    """Indicators derived from a recorded sample buffer."""
    energy: float = Field(ge=0.0, le=1.0)
    pitch: float = Field(ge=0.0, le=1.0)
    tempo: float = Field(ge=0.0, le=1.0)
    emotions: AudioEmotions


class ImageFeatures(IndicatorModel):
    """Normalized pixel statistics feeding the expression heuristics."""
    brightness: float  # global mean luma / 255
    contrast: float  # luma std / 80, capped at 1
    warmth: float  # (mean R - mean B) / 255, may be negative
    eye_edges: float  # eye band edge ratio * 15, capped at 1
    mouth_edges: float
    mouth_brightness: float  # mouth band mean luma / 255
    forehead_edges: float  # raw edge ratio, not scaled
    forehead_brightness: float  # forehead band mean luma / 255


DISTRIBUTION_TOLERANCE = 1e-6


class ExpressionScores(IndicatorModel):
    """
    Probability distribution over the seven fixed expressions.

    Every expression must be present with a finite value in [0, 1] and the
    values must sum to 1. Read-only mapping access (scores["sad"], keys(),
    values(), items()) follows EXPRESSION_NAMES order.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    neutral: float = Field(ge=0.0, le=1.0)
    happy: float = Field(ge=0.0, le=1.0)
    sad: float = Field(ge=0.0, le=1.0)
    angry: float = Field(ge=0.0, le=1.0)
    fearful: float = Field(ge=0.0, le=1.0)
    disgusted: float = Field(ge=0.0, le=1.0)
    surprised: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_sums_to_one(self) -> "ExpressionScores":
        total = math.fsum(self.values())
        if abs(total - 1.0) > DISTRIBUTION_TOLERANCE:
            raise ValueError(f"Expression scores must sum to 1, got {total:.6f}")
        return self

    def __getitem__(self, name: str) -> float:
        if name not in EXPRESSION_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def keys(self) -> List[str]:
        return list(EXPRESSION_NAMES)

    def values(self) -> List[float]:
        return [getattr(self, name) for name in EXPRESSION_NAMES]

    def items(self) -> Iterator[Tuple[str, float]]:
        return ((name, getattr(self, name)) for name in EXPRESSION_NAMES)


class ImageIndicators(IndicatorModel):
    """
    Facial expression distribution over the seven fixed expressions.

    The dominant expression is derived from the distribution on every access
    and is included in dumps.
    """
    expressions: ExpressionScores

    @computed_field(alias="dominantExpression")
    @property
    def dominant_expression(self) -> str:
        return max(EXPRESSION_NAMES, key=lambda name: self.expressions[name])


# Neutral defaults used when an input is missing or unusable
NEUTRAL_SENTIMENT = SentimentResult(label="NEUTRAL", score=0.5)

NEUTRAL_AUDIO = AudioIndicators(
    energy=0.5,
    pitch=0.5,
    tempo=0.5,
    emotions=AudioEmotions(calm=0.5, stressed=0.3, sad=0.1, anxious=0.1)
)

NEUTRAL_IMAGE = ImageIndicators(
    expressions={
        "neutral": 0.7,
        "happy": 0.1,
        "sad": 0.1,
        "angry": 0.05,
        "fearful": 0.02,
        "disgusted": 0.02,
        "surprised": 0.01
    }
)
