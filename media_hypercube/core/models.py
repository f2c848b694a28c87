"""
PROJECT:
-------
media-hypercube

TITLE:
------
models.py

MAIN OBJECTIVE:
---------------
This script defines the core data models used throughout the hypercube framework, from the
tagged documents handed over by the tagging stage to the graph emitted for rendering.

Dependencies:
-------------
- dataclasses
- typing
- enum
- math
- pandas
- networkx

MAIN FEATURES:
--------------
1) TaggedDocument, the immutable input record
2) TagSelector and TopicSelector for role assignment and topic matching
3) SalienceRecord for per-group rates and significance tests
4) ModelStatus and NullModelResult for the independence model
5) NetworkGraph node/edge container with networkx export

Author:
-------
Antoine Lemor
"""

import math
from types import MappingProxyType
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Any
import pandas as pd
import networkx as nx

from media_hypercube.core.constants import (
    DOCUMENT_TAG_FIELDS, TOPIC_TAGS, GEO_TAGS_A, GEO_TAGS_B,
    NODE_COLUMNS, EDGE_COLUMNS, INTERACTION_COLUMNS
)
from media_hypercube.core.exceptions import SchemaError


def _as_tag_set(values: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Coerce a tag collection to a frozenset, dropping blanks."""
    if values is None:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    tags = set()
    for value in values:
        if value is None or (not isinstance(value, str) and pd.isna(value)):
            continue
        value = str(value).strip()
        if value:
            tags.add(value)
    return frozenset(tags)


@dataclass(frozen=True)
class TaggedDocument:
    """A news item with its pre-assigned tags."""
    doc_id: str
    source: str
    timestamp: pd.Timestamp
    topic_tags: FrozenSet[str] = frozenset()
    geo_tags_a: FrozenSet[str] = frozenset()
    geo_tags_b: FrozenSet[str] = frozenset()
    sequence: int = 1
    extra_tags: Mapping[str, FrozenSet[str]] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if not isinstance(self.doc_id, str) or not self.doc_id:
            raise SchemaError(f"doc_id must be a non-empty string, got {self.doc_id!r}")
        if not isinstance(self.source, str) or not self.source:
            raise SchemaError(f"Document {self.doc_id}: source must be a non-empty string")

        timestamp = pd.Timestamp(self.timestamp)
        if pd.isna(timestamp):
            raise SchemaError(f"Document {self.doc_id}: invalid timestamp {self.timestamp!r}")

        object.__setattr__(self, 'timestamp', timestamp)
        object.__setattr__(self, 'topic_tags', _as_tag_set(self.topic_tags))
        object.__setattr__(self, 'geo_tags_a', _as_tag_set(self.geo_tags_a))
        object.__setattr__(self, 'geo_tags_b', _as_tag_set(self.geo_tags_b))
        object.__setattr__(self, 'extra_tags', MappingProxyType(
            {name: _as_tag_set(tags) for name, tags in dict(self.extra_tags).items()}))

    def tag_set(self, name: str) -> FrozenSet[str]:
        """Get a tag field by name (fixed field or extra tag field)."""
        if name in DOCUMENT_TAG_FIELDS:
            return getattr(self, name)
        if name in self.extra_tags:
            return self.extra_tags[name]
        raise SchemaError(f"Document {self.doc_id} has no tag field {name!r}")


@dataclass(frozen=True)
class TagSelector:
    """Names the tag field playing each hypercube role."""
    topic: str = TOPIC_TAGS
    geo_a: str = GEO_TAGS_A
    geo_b: str = GEO_TAGS_B

    def __post_init__(self):
        for role in ('topic', 'geo_a', 'geo_b'):
            value = getattr(self, role)
            if not isinstance(value, str) or not value:
                raise SchemaError(f"Selector for {role} must be a tag field name, got {value!r}")

    def roles(self) -> Dict[str, str]:
        return {'topic': self.topic, 'geo_a': self.geo_a, 'geo_b': self.geo_b}


@dataclass(frozen=True)
class TopicSelector:
    """
    Binary topic indicator over hypercube rows.

    A row matches when it carries any topic tag, or, when ``subtopic`` is
    given, when its topic equals ``subtopic``.
    """
    subtopic: Optional[str] = None

    def matches(self, topics: pd.Series) -> pd.Series:
        if self.subtopic is None:
            return topics.notna()
        return (topics == self.subtopic).fillna(False).astype(bool)

    @property
    def name(self) -> str:
        return self.subtopic if self.subtopic is not None else 'any_topic'


@dataclass
class SalienceRecord:
    """Rate and significance of one group against the baseline."""
    key: Any
    trial: float
    success: float
    null_value: float
    estimate: float = math.nan
    salience: float = math.nan
    statistic: float = math.nan
    p_value: float = math.nan

    @property
    def has_estimate(self) -> bool:
        return not math.isnan(self.estimate)

    @property
    def has_test(self) -> bool:
        return not math.isnan(self.p_value)

    def to_dict(self) -> Dict:
        """Convert to dictionary."""
        return {
            'key': self.key,
            'trial': self.trial,
            'success': self.success,
            'null_value': self.null_value,
            'estimate': self.estimate,
            'salience': self.salience,
            'statistic': self.statistic,
            'p_value': self.p_value
        }


class ModelStatus(str, Enum):
    """Outcome of a null-model fit."""
    FITTED = 'fitted'
    SIZE_EXCEEDED = 'size_exceeded'
    EMPTY = 'empty'


@dataclass
class NullModelResult:
    """Fitted independence model with per-cell expectations and residuals."""
    status: ModelStatus
    table: pd.DataFrame
    message: str = ""
    n_cells: int = 0
    max_size: Optional[int] = None
    deviance: Optional[float] = None
    feature_names: List[str] = field(default_factory=list)

    @property
    def fitted(self) -> bool:
        return self.status == ModelStatus.FITTED

    @classmethod
    def skipped(cls, status: ModelStatus, message: str, n_cells: int,
                max_size: Optional[int] = None) -> 'NullModelResult':
        return cls(status=status,
                   table=pd.DataFrame(columns=INTERACTION_COLUMNS),
                   message=message,
                   n_cells=n_cells,
                   max_size=max_size)

    def to_dict(self) -> Dict:
        return {
            'status': self.status.value,
            'message': self.message,
            'n_cells': self.n_cells,
            'max_size': self.max_size,
            'deviance': self.deviance
        }


@dataclass
class NetworkGraph:
    """Filtered interaction graph ready for an external renderer."""
    nodes: pd.DataFrame
    edges: pd.DataFrame
    loops: bool = False

    @classmethod
    def empty(cls, loops: bool = False) -> 'NetworkGraph':
        return cls(nodes=pd.DataFrame(columns=NODE_COLUMNS),
                   edges=pd.DataFrame(columns=EDGE_COLUMNS),
                   loops=loops)

    @property
    def is_empty(self) -> bool:
        return self.edges.empty

    def to_networkx(self) -> nx.DiGraph:
        """Export as a directed graph keyed by node id."""
        G = nx.DiGraph()
        for node in self.nodes.to_dict('records'):
            node_id = node.pop('id')
            G.add_node(node_id, **node)
        for edge in self.edges.to_dict('records'):
            G.add_edge(edge.pop('source'), edge.pop('target'), **edge)
        return G

    def get_statistics(self) -> Dict[str, Any]:
        return {
            'n_nodes': len(self.nodes),
            'n_edges': len(self.edges),
            'total_size': float(self.edges['size'].sum()) if not self.edges.empty else 0.0,
            'loops': self.loops
        }
