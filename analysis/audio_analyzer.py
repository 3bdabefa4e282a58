"""
Audio Indicator Extractor

Turns a recorded sample buffer into energy, pitch and tempo proxies and a
coarse emotion table.
"""

import logging
from typing import Optional, Sequence, Union

import numpy as np

from analysis.models import AudioEmotions, AudioIndicators, NEUTRAL_AUDIO
from utils.scoring import clamp01

logger = logging.getLogger(__name__)

HIGH_ENERGY_THRESHOLD = 0.6
HIGH_PITCH_THRESHOLD = 0.5
ENERGY_SCALE = 10.0
PITCH_SCALE = 50.0


def _to_samples(audio: Union[Sequence[float], np.ndarray]) -> np.ndarray:
    samples = np.asarray(audio, dtype=np.float64).ravel()
    # Non-finite samples count as silence
    return np.nan_to_num(samples, nan=0.0, posinf=0.0, neginf=0.0)


def count_zero_crossings(samples: np.ndarray) -> int:
    """Sign changes between consecutive samples (0 counts as positive)."""
    non_negative = samples >= 0
    return int(np.count_nonzero(non_negative[1:] != non_negative[:-1]))


def analyze_audio(audio: Optional[Union[Sequence[float], np.ndarray]]) -> AudioIndicators:
    """
    Extract energy/pitch/tempo and emotion scores from raw samples.

    Args:
        audio: 1-D sample buffer, or None if nothing was recorded

    Returns:
        AudioIndicators; neutral defaults for empty or unreadable input
    """
    if audio is None:
        return NEUTRAL_AUDIO

    try:
        samples = _to_samples(audio)
    except (TypeError, ValueError) as e:
        logger.warning(f"Unreadable audio buffer ({e}), using neutral defaults")
        return NEUTRAL_AUDIO

    if samples.size == 0:
        return NEUTRAL_AUDIO

    rms = float(np.sqrt(np.mean(samples ** 2)))
    zero_crossings = count_zero_crossings(samples)

    energy = clamp01(min(1.0, rms * ENERGY_SCALE))
    pitch = clamp01(min(1.0, zero_crossings / samples.size * PITCH_SCALE))
    tempo = clamp01(0.5 + (energy - 0.5) * 0.5)

    # 2x2 lookup on energy/pitch
    is_high_energy = energy > HIGH_ENERGY_THRESHOLD
    is_high_pitch = pitch > HIGH_PITCH_THRESHOLD

    emotions = AudioEmotions(
        calm=0.2 if is_high_energy else 0.7,
        stressed=0.7 if is_high_energy and is_high_pitch else 0.2,
        sad=0.6 if not is_high_energy and not is_high_pitch else 0.1,
        anxious=0.5 if is_high_pitch else 0.2
    )

    logger.debug(
        f"Audio features: rms={rms:.4f}, zero_crossings={zero_crossings}/{samples.size}, "
        f"energy={energy:.3f}, pitch={pitch:.3f}, tempo={tempo:.3f}"
    )

    return AudioIndicators(energy=energy, pitch=pitch, tempo=tempo, emotions=emotions)
