"""
PROJECT:
-------
media-hypercube

TITLE:
------
network_extractor.py

MAIN OBJECTIVE:
---------------
This script turns an interaction (or residual) table into a filtered node/edge graph: edges
are kept by size and test bounds, self loops and reverse duplicates are removed on request,
and nodes carry the mass of the edges touching them.

Dependencies:
-------------
- pandas
- numpy
- networkx
- logging
- typing

MAIN FEATURES:
--------------
1) Size bounds and minimum test statistic on edges
2) Loop removal and canonical orientation of symmetric pairs
3) Node table with incident mass and target flag
4) Edge widths normalized to the largest edge
5) Optional geographic labels and coordinates

Author:
-------
Antoine Lemor
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.constants import (
    ROW_ENTITY, COL_ENTITY, FLOW, CHI_RESIDUAL, NETWORK_MIN_SIZE, NETWORK_MIN_TEST,
    NODE_COLUMNS, EDGE_COLUMNS
)
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import NetworkGraph
from media_hypercube.utils.geo_reference import GeoReference

logger = logging.getLogger(__name__)


class NetworkExtractor:
    """
    Extracts a graph from (i, j, size, test) rows.
    """

    def __init__(self, min_size: float = NETWORK_MIN_SIZE,
                 max_size: Optional[float] = None,
                 min_test: Optional[float] = NETWORK_MIN_TEST,
                 loops: bool = False,
                 size: str = FLOW,
                 test: str = CHI_RESIDUAL,
                 max_width: float = 1.0):
        """
        Initialize extractor.

        Args:
            min_size: Smallest edge size kept
            max_size: Largest edge size kept (no bound when None)
            min_test: Smallest test value kept (no bound when None)
            loops: Keep self loops and both directions of a pair
            size: Column holding the edge size
            test: Column holding the test statistic
            max_width: Display width of the largest edge
        """
        if min_size < 0:
            raise ValidationError(f"min_size must be non-negative, got {min_size}")
        if max_size is not None and max_size < min_size:
            raise ValidationError(f"max_size ({max_size}) is below min_size ({min_size})")
        if max_width <= 0:
            raise ValidationError(f"max_width must be positive, got {max_width}")

        self.min_size = min_size
        self.max_size = max_size
        self.min_test = min_test
        self.loops = loops
        self.size = size
        self.test = test
        self.max_width = max_width

    @classmethod
    def from_config(cls, config: HypercubeConfig) -> 'NetworkExtractor':
        return cls(min_size=config.network_min_size,
                   max_size=config.network_max_size,
                   min_test=config.network_min_test,
                   loops=config.loops,
                   test=config.network_test)

    def filter_edges(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Edge rows surviving the bounds and loop policy.

        Returns:
            DataFrame with i, j, size, test
        """
        required = [ROW_ENTITY, COL_ENTITY, self.size]
        if self.min_test is not None:
            required.append(self.test)
        missing = [col for col in required if col not in table.columns]
        if missing:
            raise SchemaError(f"Network table is missing columns: {missing}")

        edges = pd.DataFrame({
            ROW_ENTITY: table[ROW_ENTITY].astype(str),
            COL_ENTITY: table[COL_ENTITY].astype(str),
            'size': table[self.size].astype(float),
            'test': table[self.test].astype(float) if self.test in table.columns else np.nan
        })

        keep = edges['size'] >= self.min_size
        if self.max_size is not None:
            keep &= edges['size'] <= self.max_size
        if self.min_test is not None:
            keep &= edges['test'] >= self.min_test
        edges = edges[keep]

        if not self.loops:
            edges = edges[edges[ROW_ENTITY] != edges[COL_ENTITY]]
            canonical = edges[ROW_ENTITY] < edges[COL_ENTITY]
            low = edges[ROW_ENTITY].where(canonical, edges[COL_ENTITY])
            high = edges[COL_ENTITY].where(canonical, edges[ROW_ENTITY])
            edges = edges.assign(**{ROW_ENTITY: low, COL_ENTITY: high, '_canonical': canonical})
            edges = (edges.sort_values('_canonical', ascending=False, kind='mergesort')
                     .drop_duplicates([ROW_ENTITY, COL_ENTITY], keep='first')
                     .drop(columns='_canonical'))

        return edges.sort_values([ROW_ENTITY, COL_ENTITY], kind='mergesort').reset_index(drop=True)

    def extract(self, table: pd.DataFrame,
                reference: Optional[GeoReference] = None) -> NetworkGraph:
        """
        Build the graph.

        Args:
            table: Interaction or residual table
            reference: Geographic reference used for labels and coordinates

        Returns:
            NetworkGraph (empty when no edge survives)
        """
        edges = self.filter_edges(table)
        if edges.empty:
            logger.warning("No edge survives the network thresholds")
            return NetworkGraph.empty(loops=self.loops)

        codes = sorted(set(edges[ROW_ENTITY]) | set(edges[COL_ENTITY]))
        node_ids = {code: idx for idx, code in enumerate(codes)}
        targets = set(edges[COL_ENTITY])

        mass = dict.fromkeys(codes, 0.0)
        for source, target, size in zip(edges[ROW_ENTITY], edges[COL_ENTITY], edges['size']):
            mass[source] += size
            if target != source:
                mass[target] += size

        nodes = pd.DataFrame({
            'id': [node_ids[code] for code in codes],
            'code': codes,
            'label': [reference.label(code) if reference is not None else code for code in codes],
            'mass': [mass[code] for code in codes],
            'is_target': [code in targets for code in codes]
        }, columns=NODE_COLUMNS)

        if reference is not None:
            coords = [reference.coordinates(code) for code in codes]
            nodes['longitude'] = [lon for lon, _ in coords]
            nodes['latitude'] = [lat for _, lat in coords]

        largest = edges['size'].max()
        width = edges['size'] / largest * self.max_width if largest > 0 else 0.0
        graph_edges = pd.DataFrame({
            'source': edges[ROW_ENTITY].map(node_ids),
            'target': edges[COL_ENTITY].map(node_ids),
            'size': edges['size'],
            'test': edges['test'],
            'width': width
        }, columns=EDGE_COLUMNS)

        logger.info(f"Network extracted: {len(nodes)} nodes, {len(graph_edges)} edges")
        return NetworkGraph(nodes=nodes, edges=graph_edges, loops=self.loops)
