"""
Fusion package for multi-modality risk fusion.

This package provides:
- Fusion logic: Per-modality risk and weighted fusion by active modalities
- Explainability: Feature importance, decision path and counterfactuals
- Orchestrator: Analysis session that re-fuses after every update
  (import fusion.orchestrator directly; it depends on the intervention package)
"""

from . import models
from . import fusion_logic
from . import explainability

__all__ = [
    'models',
    'fusion_logic',
    'explainability'
]
