"""
Image Indicator Extractor

This module estimates a facial expression distribution from pixel-region
statistics of a captured frame. It does not locate a face: it assumes the
face fills the centre of the frame and reads fixed horizontal bands for the
forehead, eyes and mouth.

The raw expression scores get a small random jitter before normalization.
Pass a seeded numpy Generator (or set noise_amplitude to 0) for repeatable
results.
"""

import logging
from typing import Dict, Optional, Tuple

import numpy as np

from analysis.config_loader import load_config
from analysis.models import EXPRESSION_NAMES, ImageFeatures, ImageIndicators, NEUTRAL_IMAGE

logger = logging.getLogger(__name__)

# Load configuration
_config = load_config()
_image_config = _config.get("image", {})
NOISE_AMPLITUDE = _image_config.get("noise_amplitude", 0.04)
EDGE_THRESHOLD = _image_config.get("edge_threshold", 20.0)

MIN_RAW_SCORE = 0.01
CONTRAST_SCALE = 80.0
EDGE_SCALE = 15.0

# Face bands as fractions of height; all share the central x band
CENTRE_X = (0.25, 0.75)
FOREHEAD_Y = (0.10, 0.30)
EYES_Y = (0.30, 0.50)
MOUTH_Y = (0.55, 0.80)


def frame_to_rgb(pixels, width: Optional[int] = None, height: Optional[int] = None) -> np.ndarray:
    """
    Convert a pixel buffer to a float array of shape (height, width, 3).

    Accepts an (H, W, 4) RGBA or (H, W, 3) RGB array, or a flat RGBA
    sequence together with width and height.

    Raises:
        ValueError: If the buffer does not match its declared dimensions
    """
    array = np.asarray(pixels, dtype=np.float64)

    if array.ndim == 3 and array.shape[2] in (3, 4):
        return array[:, :, :3]

    if width is None or height is None:
        raise ValueError("Flat pixel buffers need width and height")

    flat = array.ravel()
    expected = int(width) * int(height) * 4
    if flat.size != expected:
        raise ValueError(f"Pixel buffer has {flat.size} values, expected {expected} for {width}x{height} RGBA")

    return flat.reshape(int(height), int(width), 4)[:, :, :3]


def to_luma(rgb: np.ndarray) -> np.ndarray:
    return 0.299 * rgb[:, :, 0] + 0.587 * rgb[:, :, 1] + 0.114 * rgb[:, :, 2]


def region_stats(gray: np.ndarray, y_range: Tuple[float, float], x_range: Tuple[float, float]) -> Tuple[float, float]:
    """
    Mean luma and edge ratio of one band.

    The edge ratio is the number of horizontal neighbour pairs whose luma
    differs by more than EDGE_THRESHOLD, divided by the band's pixel count.

    Returns:
        Tuple of (brightness, edges); (128, 0) for an empty band
    """
    height, width = gray.shape
    y_start, y_end = int(height * y_range[0]), int(height * y_range[1])
    x_start, x_end = int(width * x_range[0]), int(width * x_range[1])

    region = gray[y_start:y_end, x_start:x_end]
    if region.size == 0:
        return 128.0, 0.0

    deltas = np.abs(np.diff(region, axis=1))
    edge_count = int(np.count_nonzero(deltas > EDGE_THRESHOLD))
    return float(region.mean()), edge_count / region.size


def extract_image_features(rgb: np.ndarray) -> ImageFeatures:
    """Compute the normalized statistics used by the expression heuristics."""
    gray = to_luma(rgb)

    brightness = float(gray.mean())
    contrast = float(gray.std())
    mean_r = float(rgb[:, :, 0].mean())
    mean_b = float(rgb[:, :, 2].mean())

    forehead_brightness, forehead_edges = region_stats(gray, FOREHEAD_Y, CENTRE_X)
    _, eye_edges = region_stats(gray, EYES_Y, CENTRE_X)
    mouth_brightness, mouth_edges = region_stats(gray, MOUTH_Y, CENTRE_X)

    return ImageFeatures(
        brightness=brightness / 255,
        contrast=min(1.0, contrast / CONTRAST_SCALE),
        warmth=(mean_r - mean_b) / 255,
        eye_edges=min(1.0, eye_edges * EDGE_SCALE),
        mouth_edges=min(1.0, mouth_edges * EDGE_SCALE),
        mouth_brightness=mouth_brightness / 255,
        forehead_edges=forehead_edges,
        forehead_brightness=forehead_brightness / 255
    )


def raw_expression_scores(features: ImageFeatures) -> Dict[str, float]:
    """Additive heuristic score per expression, before jitter and normalization."""
    f = features
    return {
        "neutral": 0.25 + (1 - f.contrast) * 0.2 + (1 - f.eye_edges) * 0.15,
        "happy": (0.1
                  + (0.25 if f.mouth_brightness > 0.55 else 0)
                  + (0.15 if f.warmth > 0.05 else 0)
                  + (0.1 if f.brightness > 0.5 else 0)),
        "sad": (0.1
                + (0.25 if f.brightness < 0.45 else 0)
                + (0.15 if f.warmth < -0.02 else 0)
                + (0.1 if f.mouth_edges < 0.3 else 0)),
        "angry": (0.08
                  + (0.2 if f.contrast > 0.5 else 0)
                  + (0.15 if f.eye_edges > 0.5 else 0)
                  + (0.1 if f.warmth > 0.1 else 0)),
        "fearful": (0.05
                    + (0.2 if f.eye_edges > 0.6 else 0)
                    + (0.1 if f.forehead_edges > 0.04 else 0)),
        "disgusted": (0.05
                      + (0.1 if f.contrast > 0.6 else 0)
                      + (0.1 if f.mouth_edges > 0.5 else 0)),
        "surprised": (0.05
                      + (0.15 if f.eye_edges > 0.5 else 0)
                      + (0.15 if f.mouth_brightness > 0.6 else 0)
                      + (0.1 if f.forehead_brightness > 0.55 else 0))
    }


def apply_jitter(raw: Dict[str, float], rng: np.random.Generator, amplitude: float) -> Dict[str, float]:
    """Add uniform noise in [-amplitude/2, amplitude/2) to each score, floored at 0.01."""
    return {
        name: max(MIN_RAW_SCORE, score + (rng.random() - 0.5) * amplitude)
        for name, score in raw.items()
    }


def normalize_expressions(raw: Dict[str, float]) -> Optional[Dict[str, float]]:
    total = sum(raw.values())
    if not np.isfinite(total) or total <= 0:
        return None
    return {name: raw[name] / total for name in EXPRESSION_NAMES}


def analyze_image(
    pixels,
    width: Optional[int] = None,
    height: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    noise_amplitude: Optional[float] = None
) -> ImageIndicators:
    """
    Estimate the facial expression distribution of a frame.

    Args:
        pixels: RGBA/RGB array or flat RGBA buffer, or None if no frame
        width: Frame width (required for flat buffers)
        height: Frame height (required for flat buffers)
        rng: Noise source; a fresh unseeded Generator if None
        noise_amplitude: Override for the configured jitter amplitude

    Returns:
        ImageIndicators whose expressions sum to 1
    """
    if pixels is None:
        return NEUTRAL_IMAGE

    try:
        rgb = frame_to_rgb(pixels, width, height)
    except (TypeError, ValueError) as e:
        logger.warning(f"Malformed image buffer ({e}), using neutral distribution")
        return NEUTRAL_IMAGE

    if rgb.size == 0:
        logger.warning("Empty image frame, using neutral distribution")
        return NEUTRAL_IMAGE

    rgb = np.nan_to_num(rgb, nan=0.0, posinf=255.0, neginf=0.0)

    features = extract_image_features(rgb)
    logger.debug(f"Image features: {features.model_dump()}")

    rng = rng if rng is not None else np.random.default_rng()
    amplitude = NOISE_AMPLITUDE if noise_amplitude is None else noise_amplitude

    raw = apply_jitter(raw_expression_scores(features), rng, amplitude)
    expressions = normalize_expressions(raw)
    if expressions is None:
        logger.warning("Degenerate expression scores, using neutral distribution")
        return NEUTRAL_IMAGE

    indicators = ImageIndicators(expressions=expressions)
    logger.info(f"Dominant expression: {indicators.dominant_expression} ({expressions[indicators.dominant_expression]:.3f})")
    return indicators
