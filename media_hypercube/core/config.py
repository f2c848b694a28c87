"""
PROJECT:
-------
media-hypercube

TITLE:
------
config.py

MAIN OBJECTIVE:
---------------
This script manages the configuration settings for the hypercube framework, providing
centralized parameters for every pipeline stage with environment variable overrides.

Dependencies:
-------------
- os
- json
- dataclasses
- typing

MAIN FEATURES:
--------------
1) Central configuration dataclass for all stage parameters
2) Environment variable integration for flexible deployment
3) Default values matching the documented examples
4) Validation of thresholds (negative values fail fast)
5) JSON persistence of the configuration

Author:
-------
Antoine Lemor
"""

import os
import json
from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Any
from media_hypercube.core.constants import *
from media_hypercube.core.exceptions import ConfigurationError


@dataclass
class HypercubeConfig:
    """
    Central configuration for the hypercube pipeline.
    Can be overridden via environment variables or config files.
    """

    # Hypercube construction
    time_bucket: str = field(default_factory=lambda: os.getenv("HYPERCUBE_TIME_BUCKET", DEFAULT_TIME_BUCKET))

    # Salience analysis
    min_sample: float = field(default_factory=lambda: float(os.getenv("HYPERCUBE_MIN_SAMPLE", str(MIN_SAMPLE))))
    min_expected: float = field(default_factory=lambda: float(os.getenv("HYPERCUBE_MIN_EXPECTED", str(MIN_EXPECTED))))
    alternative: str = 'greater'
    order: str = 'salience'

    # Interaction matrix thresholds
    s1: float = MIN_ROW_MASS
    s2: float = MIN_COL_MASS
    n1: int = MIN_ROW_DEGREE
    n2: int = MIN_COL_DEGREE
    k: float = BINARY_CUTOFF
    iterative: bool = False
    measure: str = NEWS_WEIGHT

    # Null model
    max_size: int = field(default_factory=lambda: int(os.getenv("HYPERCUBE_MAX_SIZE", str(MAX_MODEL_SIZE))))
    exclude_diagonal: bool = False
    residuals: bool = True

    # Network extraction
    network_min_size: float = NETWORK_MIN_SIZE
    network_max_size: Optional[float] = None
    network_min_test: Optional[float] = NETWORK_MIN_TEST
    loops: bool = False
    network_test: str = CHI_RESIDUAL

    # Output configuration
    output_dir: str = field(default_factory=lambda: os.getenv("HYPERCUBE_OUTPUT_DIR", "results/"))
    show_progress: bool = False

    def validate(self) -> bool:
        """Validate configuration consistency."""
        if self.time_bucket not in TIME_BUCKETS:
            raise ConfigurationError(
                f"time_bucket must be one of {TIME_BUCKETS}, got {self.time_bucket!r}")
        if self.alternative not in ALTERNATIVES:
            raise ConfigurationError(
                f"alternative must be one of {ALTERNATIVES}, got {self.alternative!r}")
        if self.order not in ORDER_MODES:
            raise ConfigurationError(f"order must be one of {ORDER_MODES}, got {self.order!r}")
        if self.measure not in MEASURE_COLUMNS:
            raise ConfigurationError(f"measure must be one of {MEASURE_COLUMNS}, got {self.measure!r}")

        for name in ('min_sample', 'min_expected', 's1', 's2', 'n1', 'n2', 'k',
                     'network_min_size'):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")

        if self.max_size <= 0:
            raise ConfigurationError(f"max_size must be positive, got {self.max_size}")
        if self.network_max_size is not None and self.network_max_size < self.network_min_size:
            raise ConfigurationError(
                f"network_max_size ({self.network_max_size}) is below network_min_size "
                f"({self.network_min_size})")

        return True

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Convert config to dictionary."""
        return {
            'hypercube': {
                'time_bucket': self.time_bucket
            },
            'salience': {
                'min_sample': self.min_sample,
                'min_expected': self.min_expected,
                'alternative': self.alternative,
                'order': self.order
            },
            'matrix': {
                's1': self.s1,
                's2': self.s2,
                'n1': self.n1,
                'n2': self.n2,
                'k': self.k,
                'iterative': self.iterative,
                'measure': self.measure
            },
            'null_model': {
                'max_size': self.max_size,
                'exclude_diagonal': self.exclude_diagonal,
                'residuals': self.residuals
            },
            'network': {
                'network_min_size': self.network_min_size,
                'network_max_size': self.network_max_size,
                'network_min_test': self.network_min_test,
                'loops': self.loops,
                'network_test': self.network_test
            },
            'output': {
                'output_dir': self.output_dir,
                'show_progress': self.show_progress
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HypercubeConfig':
        """Build a config from a flat or sectioned dictionary."""
        known = {f.name for f in fields(cls)}
        flat = {}
        for key, value in data.items():
            if isinstance(value, dict):
                flat.update(value)
            else:
                flat[key] = value

        unknown = set(flat) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**flat)

    @classmethod
    def from_file(cls, path: str) -> 'HypercubeConfig':
        """Load configuration from JSON file."""
        with open(path, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    def save(self, path: str) -> None:
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
