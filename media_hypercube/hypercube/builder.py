"""
PROJECT:
-------
media-hypercube

TITLE:
------
builder.py

MAIN OBJECTIVE:
---------------
This script builds the hypercube from tagged documents: every document is expanded into the
cartesian product of its topic and geographic tags, each expansion row carrying an equal share
of the document's unit mass, and rows are then aggregated by
(sequence, source, time bucket, topic, geo A, geo B).

Dependencies:
-------------
- pandas
- itertools
- collections
- logging
- math
- typing
- tqdm

MAIN FEATURES:
--------------
1) Role selection of tag fields (topic, geo A, geo B)
2) Missing-tag substitution so no document leaves a denominator
3) Weight-conserving cartesian expansion (each document sums to 1)
4) Day, week (Monday) or month time buckets
5) Deterministic row order

Author:
-------
Antoine Lemor
"""

import logging
import math
from collections import defaultdict
from itertools import product
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
from tqdm import tqdm

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.constants import (
    KEY_COLUMNS, HYPERCUBE_COLUMNS, TAG_DIMENSIONS, TAG_COUNT, NEWS_WEIGHT, TIME_BUCKETS
)
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import TaggedDocument, TagSelector
from media_hypercube.data.processor import assign_time_bucket
from media_hypercube.hypercube.hypercube import Hypercube

logger = logging.getLogger(__name__)

# Missing tag inside the expansion; becomes pd.NA in the hypercube
NO_TAG = None


def expand_document(document: TaggedDocument,
                    selector: TagSelector) -> List[Tuple[Optional[str], Optional[str], Optional[str], float]]:
    """
    Expand one document into weighted (topic, geo_a, geo_b, weight) rows.

    Empty tag sets are replaced by a single missing value, so a document
    always yields at least one row, and the weights of its rows sum to 1.
    """
    axes = []
    for field_name in (selector.topic, selector.geo_a, selector.geo_b):
        tags = document.tag_set(field_name)
        axes.append(sorted(tags) if tags else [NO_TAG])

    combinations = list(product(*axes))
    weight = 1.0 / len(combinations)
    return [(topic, geo_a, geo_b, weight) for topic, geo_a, geo_b in combinations]


class HypercubeBuilder:
    """
    Aggregates tagged documents into a Hypercube.
    """

    def __init__(self, config: Optional[HypercubeConfig] = None):
        """
        Initialize builder.

        Args:
            config: Hypercube configuration (time bucket, progress display)
        """
        self.config = config or HypercubeConfig()

    def build(self, documents: Iterable[TaggedDocument],
              time_bucket: Optional[str] = None,
              selector: Optional[TagSelector] = None,
              show_progress: Optional[bool] = None) -> Hypercube:
        """
        Build hypercube from documents.

        Args:
            documents: Tagged documents (ids must be unique)
            time_bucket: 'day', 'week' or 'month' (defaults to config)
            selector: Tag fields playing the topic, geo A and geo B roles
            show_progress: Show progress bar

        Returns:
            Hypercube whose total news_weight equals the number of documents
        """
        time_bucket = time_bucket or self.config.time_bucket
        if time_bucket not in TIME_BUCKETS:
            raise ValidationError(f"Unknown time bucket {time_bucket!r}, expected one of {TIME_BUCKETS}")
        selector = selector or TagSelector()
        if show_progress is None:
            show_progress = self.config.show_progress

        documents = list(documents)
        self._check_unique_ids(documents)

        if not documents:
            logger.warning("No documents given, returning an empty hypercube")
            return Hypercube.empty(time_bucket=time_bucket)

        logger.info(f"Building hypercube from {len(documents):,} documents "
                    f"(time bucket: {time_bucket}, roles: {selector.roles()})...")

        buckets = assign_time_bucket(pd.Series([doc.timestamp for doc in documents]), time_bucket)

        cells: Dict[Tuple, List] = defaultdict(lambda: [0, []])
        n_expanded = 0

        iterator = zip(documents, buckets)
        if show_progress:
            iterator = tqdm(iterator, total=len(documents), desc="Expanding documents")

        for doc, bucket in iterator:
            for topic, geo_a, geo_b, weight in expand_document(doc, selector):
                cell = cells[(doc.sequence, doc.source, bucket, topic, geo_a, geo_b)]
                cell[0] += 1
                cell[1].append(weight)
                n_expanded += 1

        frame = pd.DataFrame(
            [key + (count, math.fsum(weights)) for key, (count, weights) in cells.items()],
            columns=HYPERCUBE_COLUMNS
        )
        for col in TAG_DIMENSIONS:
            frame[col] = frame[col].astype('string')
        frame = frame.sort_values(KEY_COLUMNS, na_position='last', kind='mergesort')

        hypercube = Hypercube(frame, time_bucket=time_bucket)

        logger.info(f"Hypercube built: {n_expanded:,} expanded rows aggregated into "
                    f"{len(hypercube):,} cells, total mass {hypercube.n_documents:,.2f}")
        return hypercube

    @staticmethod
    def _check_unique_ids(documents: List[TaggedDocument]) -> None:
        seen = set()
        for doc in documents:
            if not isinstance(doc, TaggedDocument):
                raise SchemaError(f"Expected TaggedDocument, got {type(doc).__name__}")
            if doc.doc_id in seen:
                raise SchemaError(f"Duplicated document id {doc.doc_id!r}")
            seen.add(doc.doc_id)
