"""
Configuration and logging setup for the perturbation tooling.

Settings are read from a YAML file with a top-level ``perturbation`` section:

    perturbation:
      dtype: float32          # float16 | float32 | float64
      sigma: 0.05             # std-dev of the rotation perturbations (rad)
      n_samples: 500
      seed: 42
      corrected: true         # reliability-weight covariance normalization
      output_dir: output/plots
      log_level: INFO

Keys that are missing take the defaults of PerturbationConfig.
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import numpy as np
import yaml

from kernel_distributions.core.constants import SUPPORTED_DTYPES

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# config/perturbation_config.yaml at the repository root
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / 'config' / 'perturbation_config.yaml'


@dataclass
class PerturbationConfig:
    """Settings for sampling and analysing perturbed orientations."""
    dtype: str = 'float64'
    sigma: float = 0.05
    n_samples: int = 500
    seed: Optional[int] = None
    corrected: bool = True
    output_dir: str = 'output/plots'
    log_level: str = 'INFO'

    def __post_init__(self) -> None:
        if self.dtype not in SUPPORTED_DTYPES:
            raise ValueError(
                f"Unsupported dtype '{self.dtype}', expected one of {sorted(SUPPORTED_DTYPES)}"
            )
        if self.sigma < 0:
            raise ValueError(f"sigma must be non-negative, got {self.sigma}")
        if self.n_samples < 1:
            raise ValueError(f"n_samples must be positive, got {self.n_samples}")

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(SUPPORTED_DTYPES[self.dtype])


def load_config(config_path=None) -> PerturbationConfig:
    """
    Load the perturbation configuration from a YAML file.

    Args:
        config_path: Path to YAML config. Defaults to
            config/perturbation_config.yaml; built-in defaults are used when
            that file does not exist.

    Returns:
        PerturbationConfig with the file's values applied over the defaults.

    Raises:
        FileNotFoundError: An explicitly given file does not exist.
        ValueError: Unknown keys or invalid values.
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.debug("No configuration file at %s, using defaults", DEFAULT_CONFIG_PATH)
            return PerturbationConfig()
        config_path = DEFAULT_CONFIG_PATH

    logger.info("Loading configuration from: %s", config_path)
    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    section = raw.get('perturbation') or {}
    known = {f.name for f in fields(PerturbationConfig)}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")
    return PerturbationConfig(**section)


def configure_logging(level='INFO', log_file=None) -> None:
    """
    Configure root logging for command line entry points.

    Library modules only create loggers; handlers are installed here.
    """
    handlers = [logging.StreamHandler()]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, mode='w'))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
