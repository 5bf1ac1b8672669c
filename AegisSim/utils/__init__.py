"""Utility module for the AegisSim library.

Key Contents:
    - `metrics.py`: The variability analyzer (`compute_variability_metrics`)
      and per-band helpers for TIR, TBR, severe hypoglycemia, TAR and CV.
    - `config.py`: Loading of YAML or JSON configuration files and
      dot-path access to their values.
"""

from .config import ConfigManager, load_config, get_config_value
from .metrics import compute_variability_metrics
