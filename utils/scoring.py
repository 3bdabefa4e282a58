"""
Numeric guards shared by the extractors and the fusion engine.
"""

import math
import logging

logger = logging.getLogger(__name__)


def clamp01(value) -> float:
    """
    Clamp a score into [0, 1].

    NaN, infinities and values that cannot be read as a number count as 0.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric score {value!r} treated as 0")
        return 0.0

    if not math.isfinite(number):
        logger.debug(f"Non-finite score {value!r} treated as 0")
        return 0.0

    return min(1.0, max(0.0, number))
