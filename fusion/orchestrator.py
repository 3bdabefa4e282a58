"""
Orchestrator Layer for Fusion Service

This module orchestrates the complete assessment flow:
1. Run the extractor for the modality that just changed
2. Keep the latest indicators per modality
3. Re-fuse from scratch over the latest known set
4. Build alerts and recommendations
5. Build the explanation
6. Return the assessment report
"""

import logging
from datetime import datetime
from typing import List, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from analysis.audio_analyzer import analyze_audio
from analysis.image_analyzer import analyze_image
from analysis.models import AudioIndicators, ImageIndicators, TextIndicators
from analysis.sentiment_client import BaseSentimentClassifier
from analysis.text_analyzer import analyze_text
from fusion.explainability import explain_fusion
from fusion.fusion_logic import fuse_modalities
from fusion.models import Explanation, FusionResult
from intervention.intervention import build_intervention
from intervention.models import Alert, Recommendation

logger = logging.getLogger(__name__)


class AssessmentReport(BaseModel):
    """Everything the presentation layer needs for one assessment."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: Optional[TextIndicators] = None
    audio: Optional[AudioIndicators] = None
    image: Optional[ImageIndicators] = None
    fusion: FusionResult
    alerts: List[Alert] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    explanation: Optional[Explanation] = None


def build_assessment(
    text: Optional[TextIndicators] = None,
    audio: Optional[AudioIndicators] = None,
    image: Optional[ImageIndicators] = None
) -> Optional[AssessmentReport]:
    """
    Fuse the given indicators and derive alerts, recommendations and explanation.

    Args:
        text: Latest text indicators, or None
        audio: Latest audio indicators, or None
        image: Latest image indicators, or None

    Returns:
        AssessmentReport, or None if no modality is present
    """
    fusion = fuse_modalities(text=text, audio=audio, image=image)
    if fusion is None:
        return None

    intervention = build_intervention(fusion, text)

    return AssessmentReport(
        text=text,
        audio=audio,
        image=image,
        fusion=fusion,
        alerts=intervention.alerts,
        recommendations=intervention.recommendations,
        explanation=explain_fusion(fusion, text)
    )


class AnalysisSession:
    """
    Latest-known indicators for one user, re-fused after every update.

    Each session is independent; create one per user or request.
    """

    def __init__(
        self,
        classifier: Optional[BaseSentimentClassifier] = None,
        rng: Optional[np.random.Generator] = None,
        sentiment_timeout_seconds: Optional[float] = None
    ):
        """
        Initialize an analysis session.

        Args:
            classifier: Optional sentiment classifier capability
            rng: Noise source for the image extractor (seed it for repeatable results)
            sentiment_timeout_seconds: Optional override for the classifier timeout
        """
        self.classifier = classifier
        self.rng = rng
        self.sentiment_timeout_seconds = sentiment_timeout_seconds
        self.text: Optional[TextIndicators] = None
        self.audio: Optional[AudioIndicators] = None
        self.image: Optional[ImageIndicators] = None
        self.latest: Optional[AssessmentReport] = None

    def _refresh(self, modality: str, started_at: datetime) -> Optional[AssessmentReport]:
        self.latest = build_assessment(text=self.text, audio=self.audio, image=self.image)
        duration = (datetime.now() - started_at).total_seconds()
        if self.latest is not None:
            fusion = self.latest.fusion
            logger.info(
                f"[{modality}] Assessment updated in {duration:.3f}s: "
                f"{fusion.risk_level} ({fusion.overall_risk:.3f}), alerts={[a.id for a in self.latest.alerts]}"
            )
        return self.latest

    async def analyze_text(self, text: Optional[str]) -> Optional[AssessmentReport]:
        """
        Analyze new text and re-fuse with the latest audio/image results.

        Blank text is not an analysis: the previous text result and the
        latest report are kept unchanged.
        """
        if not text or not text.strip():
            logger.info("[text] Blank text ignored")
            return self.latest

        started_at = datetime.now()
        logger.info(f"[text] Analyzing {len(text)} characters")
        self.text = await analyze_text(text, self.classifier, self.sentiment_timeout_seconds)
        return self._refresh("text", started_at)

    def analyze_audio(self, samples) -> Optional[AssessmentReport]:
        """Analyze a new sample buffer and re-fuse with the latest text/image results."""
        started_at = datetime.now()
        logger.info("[audio] Analyzing sample buffer")
        self.audio = analyze_audio(samples)
        return self._refresh("audio", started_at)

    def analyze_image(self, pixels, width: Optional[int] = None, height: Optional[int] = None) -> Optional[AssessmentReport]:
        """Analyze a new frame and re-fuse with the latest text/audio results."""
        started_at = datetime.now()
        logger.info(f"[image] Analyzing frame {width}x{height}" if width and height else "[image] Analyzing frame")
        self.image = analyze_image(pixels, width, height, rng=self.rng)
        return self._refresh("image", started_at)

    def clear(self) -> None:
        """Forget every modality result."""
        self.text = None
        self.audio = None
        self.image = None
        self.latest = None
        logger.info("Session cleared")
