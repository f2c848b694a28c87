"""
PROJECT:
-------
media-hypercube

TITLE:
------
hypercube.py

MAIN OBJECTIVE:
---------------
This script defines the Hypercube, the aggregated fact table keyed by sequence, source,
time bucket, topic and two geographic entities, carrying a tag count and a fractional
news weight. Every analysis stage reads it; none modifies it.

Dependencies:
-------------
- pandas
- numpy
- logging
- math
- pathlib
- typing

MAIN FEATURES:
--------------
1) Schema validation and dtype normalization at construction
2) Missing tags stored as pandas missing values, never as strings
3) Flat-table serialization (CSV, pickle, JSON)
4) Summary statistics and dimension value listing

Author:
-------
Antoine Lemor
"""

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np
import pandas as pd

from media_hypercube.core.constants import (
    HYPERCUBE_COLUMNS, KEY_COLUMNS, TAG_DIMENSIONS, TAG_COUNT, NEWS_WEIGHT,
    SAVE_FORMATS, HypercubeDimension
)
from media_hypercube.core.exceptions import SchemaError, ValidationError

logger = logging.getLogger(__name__)


def _as_dimension(dimension: Union[str, HypercubeDimension]) -> str:
    try:
        return HypercubeDimension(dimension).value
    except ValueError:
        raise ValidationError(
            f"Unknown hypercube dimension {dimension!r}, expected one of {KEY_COLUMNS}") from None


class Hypercube:
    """
    Aggregated, read-only fact table.

    Columns: sequence, source, time_bucket, topic, geo_a, geo_b, tag_count,
    news_weight. Missing tags (documents with no tag in a dimension) are
    ``pd.NA`` in the nullable string columns topic, geo_a and geo_b.
    """

    def __init__(self, frame: pd.DataFrame, time_bucket: str = None):
        missing = [col for col in HYPERCUBE_COLUMNS if col not in frame.columns]
        if missing:
            raise SchemaError(f"Hypercube table is missing columns: {missing}")

        self.time_bucket = time_bucket
        self._frame = self._normalize(frame[HYPERCUBE_COLUMNS])

    @staticmethod
    def _normalize(frame: pd.DataFrame) -> pd.DataFrame:
        frame = frame.reset_index(drop=True).copy()
        frame['sequence'] = frame['sequence'].astype('int64')
        frame['source'] = frame['source'].astype('string')
        frame['time_bucket'] = pd.to_datetime(frame['time_bucket'])
        for col in TAG_DIMENSIONS:
            frame[col] = frame[col].astype('string')
        frame[TAG_COUNT] = frame[TAG_COUNT].astype('int64')
        frame[NEWS_WEIGHT] = frame[NEWS_WEIGHT].astype('float64')

        if (frame[NEWS_WEIGHT] < 0).any() or (frame[TAG_COUNT] < 0).any():
            raise SchemaError("Hypercube measures must be non-negative")
        return frame

    @classmethod
    def empty(cls, time_bucket: str = None) -> 'Hypercube':
        return cls(pd.DataFrame(columns=HYPERCUBE_COLUMNS), time_bucket=time_bucket)

    @property
    def frame(self) -> pd.DataFrame:
        """Underlying table. Treat as read-only; use to_frame() for a copy."""
        return self._frame

    def to_frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def derive(self, frame: pd.DataFrame) -> 'Hypercube':
        """New hypercube over a subset of rows, keeping the time resolution."""
        return Hypercube(frame, time_bucket=self.time_bucket)

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def is_empty(self) -> bool:
        return self._frame.empty

    @property
    def n_documents(self) -> float:
        """Total news mass, equal to the number of source documents."""
        return math.fsum(self._frame[NEWS_WEIGHT].to_numpy(dtype=float))

    def dimension_values(self, dimension: Union[str, HypercubeDimension],
                         include_missing: bool = False) -> List[Any]:
        """Sorted distinct values of one dimension."""
        col = _as_dimension(dimension)
        values = self._frame[col]
        if not include_missing:
            values = values.dropna()
        return values.drop_duplicates().sort_values(na_position='last').tolist()

    def equals(self, other: 'Hypercube') -> bool:
        return isinstance(other, Hypercube) and self._frame.equals(other._frame)

    def summary(self) -> Dict[str, Any]:
        """Summary statistics of the hypercube."""
        frame = self._frame
        summary = {
            'n_rows': len(frame),
            'n_documents': self.n_documents,
            'n_tags': int(frame[TAG_COUNT].sum()),
            'time_bucket': self.time_bucket,
            'n_sources': int(frame['source'].nunique()),
            'n_time_buckets': int(frame['time_bucket'].nunique()),
            'n_topics': int(frame['topic'].nunique()),
            'n_geo_a': int(frame['geo_a'].nunique()),
            'n_geo_b': int(frame['geo_b'].nunique()),
            'date_range': None
        }
        if not frame.empty:
            summary['date_range'] = {
                'start': frame['time_bucket'].min().isoformat(),
                'end': frame['time_bucket'].max().isoformat()
            }
        return summary

    def save(self, path: str, format: str = 'csv') -> None:
        """
        Save the hypercube as a flat table.

        Args:
            path: Output path
            format: 'csv', 'pickle' or 'json'
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        if format == 'csv':
            self._frame.to_csv(path, index=False, na_rep='', date_format='%Y-%m-%d')
        elif format == 'pickle':
            self._frame.to_pickle(path)
        elif format == 'json':
            self._frame.to_json(path, orient='records', date_format='iso', indent=2)
        else:
            raise ValueError(f"Unsupported format: {format}")

        logger.info(f"Hypercube saved to {path} ({len(self._frame):,} rows)")

    @classmethod
    def load(cls, path: str, format: str = 'csv', time_bucket: str = None) -> 'Hypercube':
        """Load a hypercube saved with save()."""
        if format not in SAVE_FORMATS:
            raise ValueError(f"Unsupported format: {format}")

        if format == 'csv':
            frame = pd.read_csv(path,
                                dtype={col: 'string' for col in ['source'] + TAG_DIMENSIONS},
                                keep_default_na=False,
                                na_values={col: [''] for col in TAG_DIMENSIONS})
        elif format == 'pickle':
            frame = pd.read_pickle(path)
        else:
            frame = pd.read_json(path, orient='records', dtype=False)
            for col in TAG_DIMENSIONS:
                frame[col] = frame[col].replace({np.nan: None})

        logger.info(f"Hypercube loaded from {path} ({len(frame):,} rows)")
        return cls(frame, time_bucket=time_bucket)

    def __repr__(self) -> str:
        return (f"Hypercube(rows={len(self._frame)}, documents={self.n_documents:.1f}, "
                f"time_bucket={self.time_bucket})")
