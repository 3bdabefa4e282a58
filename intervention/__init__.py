"""
Intervention package for alerts and recommendations.

This package provides:
- Alert engine: Prioritized alerts from a fusion result
- Recommendation engine: Next steps by risk level
- Intervention builder: Combines both into one report
"""

from . import intervention
from . import alert_engine
from . import recommendation_engine
from . import models

__all__ = [
    'intervention',
    'alert_engine',
    'recommendation_engine',
    'models'
]
