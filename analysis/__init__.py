"""
Analysis package for per-modality indicator extraction.

This package provides:
- Text extractor: lexicon scan + sentiment into emotion scores
- Audio extractor: RMS energy and zero-crossing statistics
- Image extractor: pixel-region statistics into expression distribution
- Sentiment client: optional classifier capability with neutral fallback
"""

from . import models
from . import sentiment_client
from . import text_analyzer
from . import audio_analyzer
from . import image_analyzer

__all__ = [
    'models',
    'sentiment_client',
    'text_analyzer',
    'audio_analyzer',
    'image_analyzer'
]
