"""
PROJECT:
-------
media-hypercube

TITLE:
------
aggregators.py

MAIN OBJECTIVE:
---------------
This script groups the hypercube along one dimension (none, source, time bucket or primary
geographic entity), turns the topic indicator into weighted trial/success masses, and ranks the
groups by salience or significance against the shared corpus-wide baseline.

Dependencies:
-------------
- pandas
- numpy
- logging
- typing

MAIN FEATURES:
--------------
1) Binary topic indicator per hypercube row (any topic or a given sub-topic)
2) Weighted trial/success sums per group
3) Baseline computed once and passed explicitly to every group
4) Salience and one-sided significance through SalienceAnalyzer
5) Ordering by salience (magnitude) or p-value (significance)

Author:
-------
Antoine Lemor
"""

import logging
import math
from typing import Optional, Union

import numpy as np
import pandas as pd

from media_hypercube.analysis.salience import SalienceAnalyzer, compute_baseline
from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.constants import (
    HypercubeDimension, NEWS_WEIGHT, ORDER_MODES, SALIENCE_OUTPUT_COLUMNS
)
from media_hypercube.core.exceptions import ValidationError
from media_hypercube.core.models import TopicSelector
from media_hypercube.hypercube.hypercube import Hypercube

logger = logging.getLogger(__name__)

OVERALL_KEY = 'all'


class DimensionAggregator:
    """
    Salience of a topic by source, by time bucket and by place.
    """

    def __init__(self, config: Optional[HypercubeConfig] = None,
                 analyzer: Optional[SalienceAnalyzer] = None):
        """
        Initialize aggregator.

        Args:
            config: Hypercube configuration (gates, alternative, order)
            analyzer: Salience analyzer (built from config when omitted)
        """
        self.config = config or HypercubeConfig()
        self.analyzer = analyzer or SalienceAnalyzer(
            min_sample=self.config.min_sample,
            min_expected=self.config.min_expected,
            alternative=self.config.alternative
        )

    def aggregate(self, hypercube: Hypercube,
                  by: Optional[Union[str, HypercubeDimension]] = None,
                  topic: Optional[TopicSelector] = None,
                  baseline: Optional[float] = None,
                  order: Optional[str] = None,
                  include_untagged: bool = True,
                  min_salience: Optional[float] = None,
                  max_p_value: Optional[float] = None) -> pd.DataFrame:
        """
        Salience table of a topic grouped along one dimension.

        Args:
            hypercube: Hypercube (possibly filtered)
            by: Grouping dimension, None for the overall prevalence
            topic: Topic indicator (any topic by default)
            baseline: Shared null value; computed on ``hypercube`` when omitted
            order: 'salience' (descending) or 'p_value' (ascending)
            include_untagged: Keep the group of rows with no value in ``by``
            min_salience: Drop groups with salience below this value
            max_p_value: Drop groups with p-value above this value

        Returns:
            DataFrame with key, trial, success, null_value, estimate,
            salience, statistic, p_value
        """
        topic = topic or TopicSelector()
        order = order or self.config.order
        if order not in ORDER_MODES:
            raise ValidationError(f"order must be one of {ORDER_MODES}, got {order!r}")

        column = None
        if by is not None:
            try:
                column = HypercubeDimension(by).value
            except ValueError:
                raise ValidationError(f"Unknown grouping dimension {by!r}") from None

        if baseline is None:
            baseline = compute_baseline(hypercube, topic)
        if math.isnan(baseline):
            logger.warning("Undefined baseline: salience and tests will be left unset")

        table = self._group(hypercube, column, topic, include_untagged)
        table['null_value'] = baseline

        result = self.analyzer.analyze(table)
        result = self._order(result, order, min_salience, max_p_value)

        logger.info(f"Aggregated {topic.name} by {column or 'nothing'}: {len(result)} groups "
                    f"(baseline {baseline:.4f})")
        return result

    def topic_frequency(self, hypercube: Hypercube, **kwargs) -> pd.DataFrame:
        """Overall topic prevalence (single group)."""
        return self.aggregate(hypercube, by=None, **kwargs)

    def by_source(self, hypercube: Hypercube, **kwargs) -> pd.DataFrame:
        return self.aggregate(hypercube, by=HypercubeDimension.SOURCE, **kwargs)

    def by_time(self, hypercube: Hypercube, **kwargs) -> pd.DataFrame:
        return self.aggregate(hypercube, by=HypercubeDimension.TIME, **kwargs)

    def by_place(self, hypercube: Hypercube, **kwargs) -> pd.DataFrame:
        """Salience by primary geographic entity; untagged rows are not a place."""
        kwargs.setdefault('include_untagged', False)
        return self.aggregate(hypercube, by=HypercubeDimension.GEO_A, **kwargs)

    @staticmethod
    def _group(hypercube: Hypercube, column: Optional[str],
               topic: TopicSelector, include_untagged: bool) -> pd.DataFrame:
        frame = hypercube.frame
        matches = topic.matches(frame['topic']).to_numpy()
        masses = pd.DataFrame({
            'trial': frame[NEWS_WEIGHT].to_numpy(),
            'success': np.where(matches, frame[NEWS_WEIGHT].to_numpy(), 0.0)
        }, index=frame.index)

        if column is None:
            return pd.DataFrame({
                'key': [OVERALL_KEY],
                'trial': [float(masses['trial'].sum())],
                'success': [float(masses['success'].sum())]
            })

        masses['key'] = frame[column]
        grouped = masses.groupby('key', dropna=not include_untagged, sort=True)[['trial', 'success']].sum()
        return grouped.reset_index()

    @staticmethod
    def _order(result: pd.DataFrame, order: str,
               min_salience: Optional[float],
               max_p_value: Optional[float]) -> pd.DataFrame:
        if min_salience is not None:
            result = result[result['salience'] >= min_salience]
        if max_p_value is not None:
            result = result[result['p_value'] <= max_p_value]

        result = result.sort_values('key', na_position='last', kind='mergesort')
        result = result.sort_values(order, ascending=(order == 'p_value'),
                                    na_position='last', kind='mergesort')
        return result.reset_index(drop=True)[SALIENCE_OUTPUT_COLUMNS]
