"""
PROJECT:
-------
media-hypercube

TITLE:
------
salience.py

MAIN OBJECTIVE:
---------------
This script computes the rate, salience and significance of any grouping of hypercube rows
against a corpus-wide baseline rate, with two independent gates protecting against unstable
small-sample estimates and invalid test approximations.

Dependencies:
-------------
- pandas
- numpy
- scipy
- logging
- typing

MAIN FEATURES:
--------------
1) Shared baseline computation (success/trial over the whole hypercube)
2) Estimate and salience gated on the sample size
3) One-sample proportion test with continuity correction, gated on the expected count
4) Configurable alternative ('greater', 'less', 'two-sided')
5) Not-computed fields left as NaN, never zero

Author:
-------
Antoine Lemor
"""

import logging
import math
from typing import List, Optional

import numpy as np
import pandas as pd
from scipy.stats import norm, chi2

from media_hypercube.core.constants import (
    ALTERNATIVES, MIN_SAMPLE, MIN_EXPECTED, NEWS_WEIGHT,
    SALIENCE_INPUT_COLUMNS, SALIENCE_OUTPUT_COLUMNS
)
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import SalienceRecord, TopicSelector
from media_hypercube.hypercube.hypercube import Hypercube

logger = logging.getLogger(__name__)


def compute_baseline(hypercube: Hypercube, topic: Optional[TopicSelector] = None) -> float:
    """
    Corpus-wide topic rate, the expected rate when a dimension has no effect.

    Args:
        hypercube: Hypercube (or filtered hypercube)
        topic: Topic indicator (any topic by default)

    Returns:
        success/trial over all rows, NaN when the hypercube carries no mass
    """
    topic = topic or TopicSelector()
    frame = hypercube.frame
    trial = float(frame[NEWS_WEIGHT].sum())
    if trial <= 0:
        logger.warning("Baseline is undefined: the hypercube carries no mass")
        return math.nan

    success = float(frame.loc[topic.matches(frame['topic']).to_numpy(), NEWS_WEIGHT].sum())
    baseline = success / trial
    logger.debug(f"Baseline for {topic.name}: {success:.2f}/{trial:.2f} = {baseline:.4f}")
    return baseline


def proportion_test(success: float, trial: float, null_value: float,
                    alternative: str = 'greater') -> tuple:
    """
    One-sample proportion test with Yates continuity correction.

    Returns:
        (chi-square statistic, p-value)
    """
    expected = trial * null_value
    diff = success - expected
    yates = min(0.5, abs(diff))
    statistic = (abs(diff) - yates) ** 2 / (expected * (1 - null_value))

    if alternative == 'two-sided':
        p_value = chi2.sf(statistic, df=1)
    else:
        z = math.copysign(math.sqrt(statistic), diff)
        p_value = norm.sf(z) if alternative == 'greater' else norm.cdf(z)

    return float(statistic), float(p_value)


class SalienceAnalyzer:
    """
    Computes salience records for a table of (key, trial, success, null_value).
    """

    def __init__(self, min_sample: float = MIN_SAMPLE,
                 min_expected: float = MIN_EXPECTED,
                 alternative: str = 'greater'):
        """
        Initialize analyzer.

        Args:
            min_sample: Estimate/salience computed only when trial > min_sample
            min_expected: Test computed only when trial * null_value >= min_expected
            alternative: 'greater', 'less' or 'two-sided'
        """
        if min_sample < 0 or min_expected < 0:
            raise ValidationError(
                f"Thresholds must be non-negative (min_sample={min_sample}, "
                f"min_expected={min_expected})")
        if alternative not in ALTERNATIVES:
            raise ValidationError(f"alternative must be one of {ALTERNATIVES}, got {alternative!r}")

        self.min_sample = min_sample
        self.min_expected = min_expected
        self.alternative = alternative

    def analyze(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Add estimate, salience, statistic and p_value columns.

        Args:
            table: DataFrame with key, trial, success, null_value

        Returns:
            New DataFrame; fields failing their gate are NaN
        """
        missing = [col for col in SALIENCE_INPUT_COLUMNS if col not in table.columns]
        if missing:
            raise SchemaError(f"Salience table is missing columns: {missing}")

        result = table[SALIENCE_INPUT_COLUMNS].reset_index(drop=True).copy()
        trial = result['trial'].astype(float).to_numpy()
        success = result['success'].astype(float).to_numpy()
        null_value = result['null_value'].astype(float).to_numpy()

        estimate = np.full(len(result), np.nan)
        salience = np.full(len(result), np.nan)
        statistic = np.full(len(result), np.nan)
        p_value = np.full(len(result), np.nan)

        for idx in range(len(result)):
            n, x, p = trial[idx], success[idx], null_value[idx]
            if not n > 0:
                continue

            if n > self.min_sample:
                estimate[idx] = x / n
                if p > 0:
                    salience[idx] = estimate[idx] / p

            if 0 < p < 1 and n * p >= self.min_expected:
                statistic[idx], p_value[idx] = proportion_test(x, n, p, self.alternative)

        result['estimate'] = estimate
        result['salience'] = salience
        result['statistic'] = statistic
        result['p_value'] = p_value

        n_estimated = int(np.isfinite(estimate).sum())
        n_tested = int(np.isfinite(p_value).sum())
        logger.info(f"Salience computed for {len(result)} groups: "
                    f"{n_estimated} estimated, {n_tested} tested")
        if n_estimated < len(result):
            logger.debug(f"{len(result) - n_estimated} groups below min_sample={self.min_sample}")

        return result[SALIENCE_OUTPUT_COLUMNS]

    @staticmethod
    def to_records(table: pd.DataFrame) -> List[SalienceRecord]:
        """Convert an analyzed table to SalienceRecord objects."""
        return [SalienceRecord(**{col: row[col] for col in SALIENCE_OUTPUT_COLUMNS})
                for row in table.to_dict('records')]
