"""
PROJECT:
-------
media-hypercube

TITLE:
------
processor.py

MAIN OBJECTIVE:
---------------
This script converts tagged-corpus tables handed over by the tagging stage into immutable
TaggedDocument records, and assigns timestamps to day, week or month buckets.

Dependencies:
-------------
- pandas
- numpy
- logging
- typing
- tqdm

MAIN FEATURES:
--------------
1) Schema check of the incoming table (required columns, unique ids)
2) Tag parsing from iterables or separator-delimited strings
3) Conversion to and from TaggedDocument collections
4) Time-bucket assignment with weeks anchored to Monday

Author:
-------
Antoine Lemor
"""

import pandas as pd
import numpy as np
import logging
from typing import Optional, List, Iterable, Any
from tqdm import tqdm

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.constants import (
    DOCUMENT_COLUMNS, DOCUMENT_TAG_FIELDS, TAG_SEPARATOR, TIME_BUCKETS
)
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import TaggedDocument

logger = logging.getLogger(__name__)


def assign_time_bucket(timestamps: pd.Series, resolution: str) -> pd.Series:
    """
    Map timestamps to the start of their time bucket.

    Args:
        timestamps: Series of datetimes
        resolution: 'day', 'week' (Monday-anchored) or 'month'

    Returns:
        Series of bucket start timestamps (midnight, timezone-naive)
    """
    if resolution not in TIME_BUCKETS:
        raise ValidationError(f"Unknown time bucket {resolution!r}, expected one of {TIME_BUCKETS}")

    ts = pd.to_datetime(pd.Series(timestamps))
    if ts.dt.tz is not None:
        ts = ts.dt.tz_localize(None)
    days = ts.dt.normalize()

    if resolution == 'day':
        return days
    if resolution == 'week':
        return days - pd.to_timedelta(days.dt.dayofweek, unit='D')
    return days.dt.to_period('M').dt.to_timestamp()


class DocumentProcessor:
    """
    Prepares tagged documents for hypercube construction.
    """

    def __init__(self, config: Optional[HypercubeConfig] = None,
                 separator: str = TAG_SEPARATOR):
        """
        Initialize document processor.

        Args:
            config: Hypercube configuration
            separator: Separator used when tags are stored as one string
        """
        self.config = config or HypercubeConfig()
        self.separator = separator

    def from_frame(self, df: pd.DataFrame,
                   extra_tag_columns: Optional[List[str]] = None,
                   show_progress: Optional[bool] = None) -> List[TaggedDocument]:
        """
        Convert a tagged table to documents.

        Args:
            df: Table with columns id, source, timestamp, topic_tags,
                geo_tags_a, geo_tags_b (and optionally sequence)
            extra_tag_columns: Additional tag columns to carry as extra_tags
            show_progress: Show progress bar (config default when None)

        Returns:
            List of TaggedDocument
        """
        extra_tag_columns = extra_tag_columns or []
        if show_progress is None:
            show_progress = self.config.show_progress
        missing = [col for col in DOCUMENT_COLUMNS + extra_tag_columns if col not in df.columns]
        if missing:
            raise SchemaError(f"Missing document columns: {missing}")

        duplicated = df['id'].astype(str).duplicated()
        if duplicated.any():
            raise SchemaError(
                f"Found {int(duplicated.sum())} duplicated document ids, "
                f"e.g. {df.loc[duplicated, 'id'].iloc[0]!r}")

        logger.info(f"Converting {len(df):,} rows to tagged documents...")

        records = df.to_dict('records')
        iterator = tqdm(records, desc="Reading documents") if show_progress else records

        documents = []
        for row in iterator:
            documents.append(TaggedDocument(
                doc_id=str(row['id']),
                source=str(row['source']),
                timestamp=row['timestamp'],
                topic_tags=self.parse_tags(row['topic_tags']),
                geo_tags_a=self.parse_tags(row['geo_tags_a']),
                geo_tags_b=self.parse_tags(row['geo_tags_b']),
                sequence=int(row.get('sequence', 1)),
                extra_tags={col: self.parse_tags(row[col]) for col in extra_tag_columns}
            ))

        logger.info(f"Conversion complete: {len(documents):,} documents")
        return documents

    def parse_tags(self, value: Any) -> List[str]:
        """Parse one tag cell into a list of tags."""
        if value is None:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(self.separator) if tag.strip()]
        if isinstance(value, (list, tuple, set, frozenset, np.ndarray)):
            return [str(tag).strip() for tag in value
                    if tag is not None and not pd.isna(tag) and str(tag).strip()]
        if pd.isna(value):
            return []
        return [str(value)]

    def to_frame(self, documents: Iterable[TaggedDocument]) -> pd.DataFrame:
        """Convert documents back to a flat table (tags joined by separator)."""
        rows = []
        for doc in documents:
            row = {
                'id': doc.doc_id,
                'source': doc.source,
                'timestamp': doc.timestamp,
                'sequence': doc.sequence
            }
            for name in DOCUMENT_TAG_FIELDS:
                row[name] = self.separator.join(sorted(doc.tag_set(name)))
            for name, tags in doc.extra_tags.items():
                row[name] = self.separator.join(sorted(tags))
            rows.append(row)

        return pd.DataFrame(rows, columns=None if rows else DOCUMENT_COLUMNS + ['sequence'])
