"""
Sentiment Classifier Layer for Analysis Service

This module wraps the optional sentiment classifier used by the text
extractor. The classifier is passed in by the caller; it may still be
loading, may have failed to load, or may fail or hang on a single call.
classify_with_fallback() is the only entry point the extractor uses and
always returns a SentimentResult.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Optional

from analysis.config_loader import load_config
from analysis.models import SentimentResult, NEUTRAL_SENTIMENT
from utils.scoring import clamp01

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_timeout_config = _config.get("sentiment_timeout_seconds", 2.0)

VALID_LABELS = ("POSITIVE", "NEGATIVE", "NEUTRAL")


class ClassifierState(str, Enum):
    """Lifecycle of a sentiment classifier."""
    NOT_READY = "not_ready"
    READY = "ready"
    FAILED = "failed"


class ClassifierOutputError(ValueError):
    """Raised when a classifier returns something that is not a label/score pair."""


def parse_classifier_output(raw: Any) -> SentimentResult:
    """
    Normalize raw classifier output into a SentimentResult.

    Accepts a single {"label", "score"} mapping or a list whose first item is
    one (the transformers pipeline convention).

    Raises:
        ClassifierOutputError: If the payload has no usable label/score
    """
    if isinstance(raw, SentimentResult):
        return raw

    if isinstance(raw, (list, tuple)):
        if not raw:
            raise ClassifierOutputError("Classifier returned an empty list")
        raw = raw[0]

    if not isinstance(raw, dict):
        raise ClassifierOutputError(f"Unexpected classifier output type: {type(raw).__name__}")

    label = str(raw.get("label", "")).upper()
    if label not in VALID_LABELS:
        raise ClassifierOutputError(f"Unknown sentiment label '{raw.get('label')}'")

    if "score" not in raw:
        raise ClassifierOutputError("Classifier output has no score")

    return SentimentResult(label=label, score=clamp01(raw["score"]))


class BaseSentimentClassifier:
    """Base class for sentiment classifiers with an explicit readiness state."""

    def __init__(self, name: str = "Sentiment"):
        """
        Initialize base classifier.

        Args:
            name: Name of the classifier (for logging)
        """
        self.name = name
        self.state = ClassifierState.NOT_READY

    @property
    def is_ready(self) -> bool:
        return self.state == ClassifierState.READY

    async def classify(self, text: str) -> SentimentResult:
        """
        Classify text sentiment.

        Raises:
            RuntimeError: If the classifier is not ready
            ClassifierOutputError: If the prediction cannot be parsed
        """
        if not self.is_ready:
            raise RuntimeError(f"{self.name} classifier is {self.state.value}")

        raw = await self._predict(text)
        return parse_classifier_output(raw)

    async def _predict(self, text: str) -> Any:
        raise NotImplementedError


class PipelineSentimentClassifier(BaseSentimentClassifier):
    """
    Classifier backed by a transformers-style sentiment pipeline.

    The loader is any zero-argument callable returning a callable with the
    pipeline("sentiment-analysis") convention: predict(text) ->
    [{"label": ..., "score": ...}]. Synchronous predictors run in a worker
    thread so a timeout can be applied around them.
    """

    def __init__(self, loader: Callable[[], Callable[[str], Any]], name: str = "Pipeline"):
        super().__init__(name)
        self._loader = loader
        self._predictor: Optional[Callable[[str], Any]] = None

    def load(self) -> ClassifierState:
        """
        Load the underlying pipeline once.

        Returns:
            The resulting state (READY or FAILED)
        """
        if self.state != ClassifierState.NOT_READY:
            return self.state

        try:
            self._predictor = self._loader()
            self.state = ClassifierState.READY
            logger.info(f"{self.name} sentiment classifier loaded")
        except Exception as e:
            self.state = ClassifierState.FAILED
            logger.warning(f"{self.name} sentiment classifier failed to load: {e}")

        return self.state

    async def _predict(self, text: str) -> Any:
        if inspect.iscoroutinefunction(self._predictor):
            return await self._predictor(text)

        result = await asyncio.to_thread(self._predictor, text)
        if inspect.isawaitable(result):
            result = await result
        return result


async def classify_with_fallback(
    classifier: Optional[BaseSentimentClassifier],
    text: str,
    timeout_seconds: Optional[float] = None
) -> SentimentResult:
    """
    Get a sentiment judgment, or the neutral default if none is available.

    Args:
        classifier: Classifier capability, or None if the caller has none. Any
                    object with an async classify(text) works; readiness
                    is checked only when it exposes is_ready.
        text: Text to classify
        timeout_seconds: Upper bound on the wait (defaults to config value)

    Returns:
        SentimentResult from the classifier, or NEUTRAL/0.5 on any failure
    """
    if classifier is None:
        logger.debug("No sentiment classifier supplied, using neutral default")
        return NEUTRAL_SENTIMENT

    if not text or not text.strip():
        return NEUTRAL_SENTIMENT

    name = getattr(classifier, "name", type(classifier).__name__)
    if not getattr(classifier, "is_ready", True):
        state = getattr(classifier, "state", "not ready")
        logger.info(f"{name} classifier is {getattr(state, 'value', state)}, using neutral default")
        return NEUTRAL_SENTIMENT

    timeout = timeout_seconds if timeout_seconds is not None else _timeout_config

    try:
        raw = await asyncio.wait_for(classifier.classify(text), timeout=timeout)
        result = parse_classifier_output(raw)
        logger.debug(f"{name} sentiment: {result.label} ({result.score:.3f})")
        return result
    except asyncio.TimeoutError:
        logger.warning(f"{name} classifier timed out after {timeout}s, using neutral default")
        return NEUTRAL_SENTIMENT
    except Exception as e:
        logger.warning(f"{name} classifier failed: {e}, using neutral default")
        return NEUTRAL_SENTIMENT
