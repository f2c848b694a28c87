"""
PROJECT:
-------
media-hypercube

TITLE:
------
filters.py

MAIN OBJECTIVE:
---------------
This script provides the declarative row filter of the hypercube: time range, inclusion and
exclusion lists per dimension, and removal of self pairs.

Dependencies:
-------------
- pandas
- dataclasses
- logging
- typing

MAIN FEATURES:
--------------
1) Inclusive, optional time bounds
2) Independent inclusion/exclusion lists for source, geo A and geo B
3) Self-pair (geo A == geo B) removal
4) Conditions combined by logical AND; absent conditions are no-ops

Author:
-------
Antoine Lemor
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

import pandas as pd

from media_hypercube.core.exceptions import ValidationError
from media_hypercube.hypercube.hypercube import Hypercube

logger = logging.getLogger(__name__)


def _as_set(values: Optional[Iterable[str]]) -> Optional[FrozenSet[str]]:
    if values is None:
        return None
    if isinstance(values, str):
        return frozenset([values])
    return frozenset(values)


@dataclass(frozen=True)
class HypercubeFilter:
    """Row filter over a hypercube."""
    start: Optional[pd.Timestamp] = None
    end: Optional[pd.Timestamp] = None
    include_sources: Optional[FrozenSet[str]] = None
    exclude_sources: Optional[FrozenSet[str]] = None
    include_geo_a: Optional[FrozenSet[str]] = None
    exclude_geo_a: Optional[FrozenSet[str]] = None
    include_geo_b: Optional[FrozenSet[str]] = None
    exclude_geo_b: Optional[FrozenSet[str]] = None
    self_pairs: bool = True

    def __post_init__(self):
        for name in ('start', 'end'):
            value = getattr(self, name)
            if value is not None:
                value = pd.Timestamp(value)
                # Buckets are timezone-naive
                if value.tzinfo is not None:
                    value = value.tz_localize(None)
                object.__setattr__(self, name, value)
        for name in ('include_sources', 'exclude_sources', 'include_geo_a',
                     'exclude_geo_a', 'include_geo_b', 'exclude_geo_b'):
            object.__setattr__(self, name, _as_set(getattr(self, name)))

        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValidationError(f"Filter start {self.start} is after end {self.end}")

    @property
    def is_noop(self) -> bool:
        return (self.start is None and self.end is None and self.self_pairs
                and all(getattr(self, name) is None for name in (
                    'include_sources', 'exclude_sources', 'include_geo_a',
                    'exclude_geo_a', 'include_geo_b', 'exclude_geo_b')))

    def mask(self, frame: pd.DataFrame) -> pd.Series:
        """Boolean mask of rows kept by the filter."""
        keep = pd.Series(True, index=frame.index)

        if self.start is not None:
            keep &= frame['time_bucket'] >= self.start
        if self.end is not None:
            keep &= frame['time_bucket'] <= self.end

        keep &= self._list_mask(frame['source'], self.include_sources, self.exclude_sources)
        keep &= self._list_mask(frame['geo_a'], self.include_geo_a, self.exclude_geo_a)
        keep &= self._list_mask(frame['geo_b'], self.include_geo_b, self.exclude_geo_b)

        if not self.self_pairs:
            same = (frame['geo_a'] == frame['geo_b']).fillna(False).astype(bool)
            keep &= ~same

        return keep

    @staticmethod
    def _list_mask(values: pd.Series,
                   include: Optional[FrozenSet[str]],
                   exclude: Optional[FrozenSet[str]]) -> pd.Series:
        # Missing tags never match either list
        keep = pd.Series(True, index=values.index)
        if exclude is not None:
            keep &= ~values.isin(exclude).fillna(False).astype(bool)
        if include is not None:
            keep &= values.isin(include).fillna(False).astype(bool)
        return keep

    def apply(self, hypercube: Hypercube) -> Hypercube:
        """
        Filter hypercube rows.

        Args:
            hypercube: Source hypercube (not modified)

        Returns:
            New hypercube with the rows satisfying every condition
        """
        if self.is_noop:
            return hypercube.derive(hypercube.frame)

        frame = hypercube.frame
        filtered = frame[self.mask(frame)]

        logger.info(f"Filter kept {len(filtered):,} of {len(frame):,} hypercube rows")
        if filtered.empty and not frame.empty:
            logger.warning("Filter removed every hypercube row")

        return hypercube.derive(filtered)
