"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py

MAIN OBJECTIVE:
---------------
This script initializes the media_hypercube package, exposing the pipeline stages that turn a
tagged news corpus into salience tables and statistically validated interaction networks.

Dependencies:
-------------
- media_hypercube.core
- media_hypercube.hypercube
- media_hypercube.analysis
- media_hypercube.network
- media_hypercube.pipelines

MAIN FEATURES:
--------------
1) Hypercube construction and filtering
2) Salience analysis by dimension
3) Interaction matrix, null model and network extraction
4) End-to-end pipeline

Author:
-------
Antoine Lemor
"""

from media_hypercube.core import (
    HypercubeConfig, TaggedDocument, TagSelector, TopicSelector, ModelStatus
)
from media_hypercube.hypercube import Hypercube, HypercubeBuilder, HypercubeFilter
from media_hypercube.analysis import SalienceAnalyzer, DimensionAggregator, compute_baseline
from media_hypercube.network import InteractionMatrixBuilder, NullModelEstimator, NetworkExtractor
from media_hypercube.pipelines import HypercubePipeline, PipelineResults

__version__ = '1.0.0'

__all__ = [
    'HypercubeConfig',
    'TaggedDocument',
    'TagSelector',
    'TopicSelector',
    'ModelStatus',
    'Hypercube',
    'HypercubeBuilder',
    'HypercubeFilter',
    'SalienceAnalyzer',
    'DimensionAggregator',
    'compute_baseline',
    'InteractionMatrixBuilder',
    'NullModelEstimator',
    'NetworkExtractor',
    'HypercubePipeline',
    'PipelineResults'
]
