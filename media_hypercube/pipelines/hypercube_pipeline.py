"""
PROJECT:
-------
media-hypercube

TITLE:
------
hypercube_pipeline.py

MAIN OBJECTIVE:
---------------
This script orchestrates the whole aggregation-and-inference pipeline: hypercube construction,
optional filtering, topic salience along every dimension, the thresholded interaction matrix,
the Poisson independence model and the extraction of the residual network.

Dependencies:
-------------
- typing
- dataclasses
- datetime
- pandas
- pathlib
- json
- logging
- uuid
- time

MAIN FEATURES:
--------------
1) Single entry point driven by HypercubeConfig
2) Baseline computed once and shared by the four aggregators
3) Expected data conditions collected as warnings, never raised
4) JSON-serializable summary of every stage

Author:
-------
Antoine Lemor
"""

import json
import logging
import math
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from media_hypercube.analysis.aggregators import DimensionAggregator
from media_hypercube.analysis.salience import compute_baseline
from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.constants import CHI_RESIDUAL, FLOW
from media_hypercube.core.models import (
    ModelStatus, NetworkGraph, NullModelResult, TaggedDocument, TagSelector, TopicSelector
)
from media_hypercube.hypercube.builder import HypercubeBuilder
from media_hypercube.hypercube.filters import HypercubeFilter
from media_hypercube.hypercube.hypercube import Hypercube
from media_hypercube.network.interaction_matrix import InteractionMatrixBuilder
from media_hypercube.network.network_extractor import NetworkExtractor
from media_hypercube.network.null_model import NullModelEstimator
from media_hypercube.utils.geo_reference import GeoReference

logger = logging.getLogger(__name__)


@dataclass
class PipelineResults:
    """
    Complete results of one pipeline execution.
    """
    pipeline_id: str
    execution_timestamp: datetime
    execution_duration: float  # seconds
    config_used: HypercubeConfig

    hypercube: Hypercube
    filtered: Hypercube
    topic: TopicSelector
    baseline: float

    topic_frequency: pd.DataFrame
    by_source: pd.DataFrame
    by_time: pd.DataFrame
    by_place: pd.DataFrame

    interactions: pd.DataFrame
    null_model: NullModelResult
    network: NetworkGraph

    warnings: List[Dict[str, Any]] = field(default_factory=list)

    def get_summary(self) -> Dict[str, Any]:
        """Get summary of pipeline results."""
        return {
            'pipeline_id': self.pipeline_id,
            'execution': {
                'timestamp': self.execution_timestamp.isoformat(),
                'duration_seconds': self.execution_duration
            },
            'config': self.config_used.to_dict(),
            'hypercube': self.hypercube.summary(),
            'filtered': self.filtered.summary(),
            'topic': self.topic.name,
            'baseline': None if math.isnan(self.baseline) else self.baseline,
            'salience_groups': {
                'topic_frequency': len(self.topic_frequency),
                'by_source': len(self.by_source),
                'by_time': len(self.by_time),
                'by_place': len(self.by_place)
            },
            'interactions': len(self.interactions),
            'null_model': self.null_model.to_dict(),
            'network': self.network.get_statistics(),
            'warnings': self.warnings
        }

    def save(self, path: Optional[str] = None) -> Path:
        """
        Save the summary as JSON.

        Args:
            path: Output file (defaults to pipeline_<id>.json in config.output_dir)

        Returns:
            Path written
        """
        if path is None:
            path = Path(self.config_used.output_dir) / f"pipeline_{self.pipeline_id}.json"
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.get_summary(), f, indent=2, default=str)
        logger.info(f"Pipeline summary saved to {path}")
        return path


class HypercubePipeline:
    """
    Orchestrates every stage from tagged documents to the residual network.
    """

    def __init__(self, config: Optional[HypercubeConfig] = None):
        """Initialize pipeline."""
        self.config = config or HypercubeConfig()
        self.config.validate()
        self.pipeline_id = str(uuid.uuid4())

        self.builder = HypercubeBuilder(self.config)
        self.aggregator = DimensionAggregator(self.config)
        self.matrix_builder = InteractionMatrixBuilder.from_config(self.config)
        self.null_model = NullModelEstimator.from_config(self.config)
        self.extractor = NetworkExtractor.from_config(self.config)

        logger.info(f"HypercubePipeline initialized with ID: {self.pipeline_id}")

    def run(self, documents: Iterable[TaggedDocument],
            topic: Optional[TopicSelector] = None,
            selector: Optional[TagSelector] = None,
            hypercube_filter: Optional[HypercubeFilter] = None,
            reference: Optional[GeoReference] = None) -> PipelineResults:
        """
        Execute the complete pipeline.

        Args:
            documents: Tagged documents
            topic: Topic indicator for salience (any topic by default)
            selector: Tag field roles for the hypercube
            hypercube_filter: Row filter applied before the interaction stages
            reference: Geographic reference for node labels

        Returns:
            PipelineResults
        """
        start_time = time.time()
        topic = topic or TopicSelector()
        warnings: List[Dict[str, Any]] = []

        logger.info("Step 1: Building hypercube...")
        hypercube = self.builder.build(documents, selector=selector)
        if hypercube.is_empty:
            warnings.append({'stage': 'hypercube', 'condition': 'empty_result'})

        logger.info("Step 2: Filtering hypercube...")
        filtered = hypercube_filter.apply(hypercube) if hypercube_filter else hypercube
        if filtered.is_empty and not hypercube.is_empty:
            warnings.append({'stage': 'filter', 'condition': 'empty_result'})

        logger.info("Step 3: Topic salience by dimension...")
        baseline = compute_baseline(filtered, topic)
        if math.isnan(baseline):
            warnings.append({'stage': 'salience', 'condition': 'undefined_baseline'})

        topic_frequency = self.aggregator.topic_frequency(filtered, topic=topic, baseline=baseline)
        by_source = self.aggregator.by_source(filtered, topic=topic, baseline=baseline)
        by_time = self.aggregator.by_time(filtered, topic=topic, baseline=baseline)
        by_place = self.aggregator.by_place(filtered, topic=topic, baseline=baseline)

        for name, table in (('by_source', by_source), ('by_time', by_time), ('by_place', by_place)):
            n_unset = int(table['estimate'].isna().sum())
            if n_unset:
                warnings.append({'stage': name, 'condition': 'insufficient_sample', 'groups': n_unset})
            n_untested = int(table['p_value'].isna().sum())
            if n_untested:
                warnings.append({'stage': name, 'condition': 'insufficient_expected_count',
                                 'groups': n_untested})

        logger.info("Step 4: Interaction matrix...")
        interactions = self.matrix_builder.build(filtered)
        if interactions.empty:
            warnings.append({'stage': 'interaction_matrix', 'condition': 'empty_result'})

        logger.info("Step 5: Null model...")
        null_model = self.null_model.fit(interactions)
        if null_model.status != ModelStatus.FITTED:
            warnings.append({'stage': 'null_model', 'condition': null_model.status.value,
                             'message': null_model.message})

        logger.info("Step 6: Network extraction...")
        network = self._extract_network(interactions, null_model, reference)
        if network.is_empty:
            warnings.append({'stage': 'network', 'condition': 'empty_result'})

        duration = time.time() - start_time
        logger.info(f"Pipeline completed in {duration:.2f}s with {len(warnings)} warnings")

        return PipelineResults(
            pipeline_id=self.pipeline_id,
            execution_timestamp=datetime.now(),
            execution_duration=duration,
            config_used=self.config,
            hypercube=hypercube,
            filtered=filtered,
            topic=topic,
            baseline=baseline,
            topic_frequency=topic_frequency,
            by_source=by_source,
            by_time=by_time,
            by_place=by_place,
            interactions=interactions,
            null_model=null_model,
            network=network,
            warnings=warnings
        )

    def _extract_network(self, interactions: pd.DataFrame,
                         null_model: NullModelResult,
                         reference: Optional[GeoReference]) -> NetworkGraph:
        if null_model.fitted and CHI_RESIDUAL in null_model.table.columns:
            return self.extractor.extract(null_model.table, reference=reference)

        # Without residuals the network can only be thresholded on size
        if self.extractor.test == CHI_RESIDUAL and self.extractor.min_test is not None:
            logger.warning("No residuals available; network extracted on size only")
        size_only = NetworkExtractor(min_size=self.extractor.min_size,
                                     max_size=self.extractor.max_size,
                                     min_test=None,
                                     loops=self.extractor.loops,
                                     size=FLOW,
                                     max_width=self.extractor.max_width)
        return size_only.extract(interactions, reference=reference)
