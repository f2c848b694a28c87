"""
PROJECT:
-------
media-hypercube

TITLE:
------
interaction_matrix.py

MAIN OBJECTIVE:
---------------
This script pivots two entity dimensions of the hypercube into a dense co-occurrence matrix
and keeps the rows and columns that pass mass and binarized-degree thresholds, returning the
surviving submatrix as (i, j, Fij) triples.

Dependencies:
-------------
- pandas
- logging
- typing

MAIN FEATURES:
--------------
1) Dense i x j matrix of summed weights (missing cells = 0)
2) Row/column mass thresholds (s1, s2)
3) Binarization at cutoff k and row/column degree thresholds (n1, n2)
4) Single-pass filtering, with an optional iterative fixpoint
5) Melted triples over the surviving submatrix

Author:
-------
Antoine Lemor
"""

import logging
from typing import Union

import pandas as pd

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.constants import (
    ROW_ENTITY, COL_ENTITY, FLOW, INTERACTION_COLUMNS, MEASURE_COLUMNS, NEWS_WEIGHT,
    MIN_ROW_MASS, MIN_COL_MASS, MIN_ROW_DEGREE, MIN_COL_DEGREE, BINARY_CUTOFF
)
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.hypercube.hypercube import Hypercube

logger = logging.getLogger(__name__)


class InteractionMatrixBuilder:
    """
    Thresholded interaction matrix between geo A (rows) and geo B (columns).

    Steps 2 and 4 are applied once: a row passing its own threshold may end
    below it once correlated columns are removed. Set ``iterative=True`` to
    repeat the thresholds until nothing else is removed.
    """

    def __init__(self, s1: float = MIN_ROW_MASS, s2: float = MIN_COL_MASS,
                 n1: int = MIN_ROW_DEGREE, n2: int = MIN_COL_DEGREE, k: float = BINARY_CUTOFF,
                 iterative: bool = False, measure: str = NEWS_WEIGHT):
        """
        Initialize builder.

        Args:
            s1: Minimum row mass
            s2: Minimum column mass
            n1: Minimum binarized row degree
            n2: Minimum binarized column degree
            k: Binarization cutoff (value >= k counts as a link)
            iterative: Repeat thresholds to a fixpoint
            measure: Hypercube measure summed into the matrix
        """
        for name, value in (('s1', s1), ('s2', s2), ('n1', n1), ('n2', n2), ('k', k)):
            if value < 0:
                raise ValidationError(f"{name} must be non-negative, got {value}")
        if measure not in MEASURE_COLUMNS:
            raise ValidationError(f"measure must be one of {MEASURE_COLUMNS}, got {measure!r}")

        self.s1 = s1
        self.s2 = s2
        self.n1 = n1
        self.n2 = n2
        self.k = k
        self.iterative = iterative
        self.measure = measure

    @classmethod
    def from_config(cls, config: HypercubeConfig) -> 'InteractionMatrixBuilder':
        return cls(s1=config.s1, s2=config.s2, n1=config.n1, n2=config.n2, k=config.k,
                   iterative=config.iterative, measure=config.measure)

    def pairs(self, source: Union[Hypercube, pd.DataFrame]) -> pd.DataFrame:
        """
        Entity pairs with their weight.

        Args:
            source: Hypercube (geo_a x geo_b) or DataFrame with i, j, Fij

        Returns:
            DataFrame with i, j, Fij; pairs with an untagged side are dropped
        """
        if isinstance(source, Hypercube):
            frame = source.frame
            rows = pd.DataFrame({
                ROW_ENTITY: frame['geo_a'],
                COL_ENTITY: frame['geo_b'],
                FLOW: frame[self.measure].astype(float)
            })
        else:
            missing = [col for col in INTERACTION_COLUMNS if col not in source.columns]
            if missing:
                raise SchemaError(f"Interaction rows are missing columns: {missing}")
            rows = source[INTERACTION_COLUMNS].copy()
            rows[FLOW] = rows[FLOW].astype(float)

        untagged = rows[ROW_ENTITY].isna() | rows[COL_ENTITY].isna()
        if untagged.any():
            logger.debug(f"Dropping {int(untagged.sum())} rows with an untagged entity")
        rows = rows[~untagged].copy()
        rows[ROW_ENTITY] = rows[ROW_ENTITY].astype(str)
        rows[COL_ENTITY] = rows[COL_ENTITY].astype(str)
        return rows.reset_index(drop=True)

    def matrix(self, source: Union[Hypercube, pd.DataFrame]) -> pd.DataFrame:
        """Dense surviving matrix (rows i, columns j)."""
        rows = self.pairs(source)
        if rows.empty:
            return pd.DataFrame(dtype=float)

        matrix = rows.pivot_table(index=ROW_ENTITY, columns=COL_ENTITY, values=FLOW,
                                  aggfunc='sum', fill_value=0.0)
        matrix = matrix.sort_index(axis=0).sort_index(axis=1).astype(float)
        logger.info(f"Interaction matrix: {matrix.shape[0]} x {matrix.shape[1]}, "
                    f"total {matrix.to_numpy().sum():,.2f}")

        matrix = self._threshold(matrix)
        if self.iterative:
            n_passes = 1
            while True:
                reduced = self._threshold(matrix)
                if reduced.shape == matrix.shape:
                    break
                matrix = reduced
                n_passes += 1
            logger.debug(f"Iterative thresholding converged after {n_passes} passes")

        logger.info(f"Surviving submatrix: {matrix.shape[0]} x {matrix.shape[1]}")
        return matrix

    def _threshold(self, matrix: pd.DataFrame) -> pd.DataFrame:
        row_ok = matrix.sum(axis=1) >= self.s1
        col_ok = matrix.sum(axis=0) >= self.s2
        matrix = matrix.loc[row_ok, col_ok]

        binary = (matrix >= self.k).astype(int)
        row_ok = binary.sum(axis=1) >= self.n1
        col_ok = binary.sum(axis=0) >= self.n2
        return matrix.loc[row_ok, col_ok]

    def build(self, source: Union[Hypercube, pd.DataFrame]) -> pd.DataFrame:
        """
        Thresholded interaction triples.

        Args:
            source: Hypercube or DataFrame with i, j, Fij

        Returns:
            DataFrame with i, j, Fij over the surviving submatrix (zeros
            included), sorted by i then j
        """
        matrix = self.matrix(source)
        if matrix.shape[0] == 0 or matrix.shape[1] == 0:
            logger.warning("No interaction survives the matrix thresholds")
            return pd.DataFrame({ROW_ENTITY: pd.Series(dtype=object),
                                 COL_ENTITY: pd.Series(dtype=object),
                                 FLOW: pd.Series(dtype=float)})

        triples = (matrix.rename_axis(index=ROW_ENTITY, columns=None)
                   .reset_index()
                   .melt(id_vars=ROW_ENTITY, var_name=COL_ENTITY, value_name=FLOW))
        triples = triples.sort_values([ROW_ENTITY, COL_ENTITY], kind='mergesort')
        triples[FLOW] = triples[FLOW].astype(float)
        return triples.reset_index(drop=True)[INTERACTION_COLUMNS]
