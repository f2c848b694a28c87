"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py (analysis module)

MAIN OBJECTIVE:
---------------
This script initializes the analysis module, providing salience computation and the
dimension aggregators (topic frequency, by source, by time, by place).

Dependencies:
-------------
- media_hypercube.analysis.salience
- media_hypercube.analysis.aggregators

MAIN FEATURES:
--------------
1) Exports SalienceAnalyzer, compute_baseline and proportion_test
2) Exports DimensionAggregator

Author:
-------
Antoine Lemor
"""

from media_hypercube.analysis.salience import SalienceAnalyzer, compute_baseline, proportion_test
from media_hypercube.analysis.aggregators import DimensionAggregator

__all__ = [
    'SalienceAnalyzer',
    'compute_baseline',
    'proportion_test',
    'DimensionAggregator'
]
