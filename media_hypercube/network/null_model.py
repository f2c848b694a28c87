"""
PROJECT:
-------
media-hypercube

TITLE:
------
null_model.py

MAIN OBJECTIVE:
---------------
This script fits the independence null model of an interaction table: cell counts are Poisson
with a log link and one fixed effect per row entity and per column entity. Fitted values give
the expected co-occurrence Eij, from which absolute, relative and signed chi-square residuals
are derived.

Dependencies:
-------------
- pandas
- numpy
- sklearn
- logging
- warnings
- typing

MAIN FEATURES:
--------------
1) Explicit design matrix (one-hot row/column effects, first level dropped)
2) Unpenalized Poisson regression with intercept
3) Size guard skipping the fit on tables above max_size cells
4) Optional exclusion of the diagonal (i == j) before fitting
5) Residual table sorted by signed chi-square residual

Author:
-------
Antoine Lemor
"""

import logging
import warnings
from typing import List, Tuple

import numpy as np
import pandas as pd
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import PoissonRegressor
from sklearn.metrics import mean_poisson_deviance
from sklearn.preprocessing import OneHotEncoder

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.constants import (
    ROW_ENTITY, COL_ENTITY, FLOW, INTERACTION_COLUMNS, EXPECTED,
    ABS_RESIDUAL, REL_RESIDUAL, CHI_RESIDUAL, MAX_MODEL_SIZE
)
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import ModelStatus, NullModelResult

logger = logging.getLogger(__name__)


def build_design_matrix(triples: pd.DataFrame) -> Tuple[np.ndarray, List[str]]:
    """
    One-hot design matrix of the row and column entities.

    The first level (in sorted order) of each entity is the reference and
    has no column; the intercept is added by the regression.

    Returns:
        (X, feature names)
    """
    entities = triples[[ROW_ENTITY, COL_ENTITY]].astype(str)
    categories = [sorted(entities[ROW_ENTITY].unique()), sorted(entities[COL_ENTITY].unique())]
    encoder = OneHotEncoder(categories=categories, drop='first',
                            sparse_output=False, dtype=float)
    X = encoder.fit_transform(entities)
    names = encoder.get_feature_names_out([ROW_ENTITY, COL_ENTITY]).tolist()
    return X, names


def add_residuals(table: pd.DataFrame) -> pd.DataFrame:
    """Absolute, relative and signed chi-square residuals from Fij and Eij."""
    table = table.copy()
    observed = table[FLOW].to_numpy(dtype=float)
    expected = table[EXPECTED].to_numpy(dtype=float)
    diff = observed - expected
    table[ABS_RESIDUAL] = diff
    table[REL_RESIDUAL] = observed / expected
    table[CHI_RESIDUAL] = np.sign(diff) * diff ** 2 / expected
    return table


class NullModelEstimator:
    """
    Poisson independence model for interaction tables.
    """

    def __init__(self, max_size: int = MAX_MODEL_SIZE,
                 exclude_diagonal: bool = False,
                 residuals: bool = True,
                 max_iter: int = 1000,
                 tol: float = 1e-10):
        """
        Initialize estimator.

        Args:
            max_size: Largest number of cells the regression is attempted on
            exclude_diagonal: Drop i == j cells before fitting
            residuals: Compute residual columns after fitting
            max_iter: Solver iterations
            tol: Solver tolerance
        """
        if max_size <= 0:
            raise ValidationError(f"max_size must be positive, got {max_size}")

        self.max_size = max_size
        self.exclude_diagonal = exclude_diagonal
        self.residuals = residuals
        self.max_iter = max_iter
        self.tol = tol

    @classmethod
    def from_config(cls, config: HypercubeConfig) -> 'NullModelEstimator':
        return cls(max_size=config.max_size,
                   exclude_diagonal=config.exclude_diagonal,
                   residuals=config.residuals)

    def fit(self, triples: pd.DataFrame) -> NullModelResult:
        """
        Fit the independence model.

        Args:
            triples: DataFrame with i, j, Fij

        Returns:
            NullModelResult; the table carries Eij (and residuals) only when
            the status is FITTED
        """
        missing = [col for col in INTERACTION_COLUMNS if col not in triples.columns]
        if missing:
            raise SchemaError(f"Interaction table is missing columns: {missing}")
        if (triples[FLOW] < 0).any():
            raise SchemaError("Interaction counts must be non-negative")

        table = triples[INTERACTION_COLUMNS].reset_index(drop=True)
        if self.exclude_diagonal:
            table = table[table[ROW_ENTITY] != table[COL_ENTITY]].reset_index(drop=True)

        n_cells = len(table)
        if n_cells > self.max_size:
            message = (f"Interaction table has {n_cells:,} cells, above max_size={self.max_size:,}; "
                       f"null model not fitted")
            logger.warning(message)
            return NullModelResult.skipped(ModelStatus.SIZE_EXCEEDED, message, n_cells, self.max_size)

        if n_cells == 0 or table[FLOW].sum() <= 0:
            message = "Interaction table is empty; null model not fitted"
            logger.warning(message)
            return NullModelResult.skipped(ModelStatus.EMPTY, message, n_cells, self.max_size)

        X, feature_names = build_design_matrix(table)
        y = table[FLOW].to_numpy(dtype=float)
        logger.info(f"Fitting Poisson independence model on {n_cells:,} cells "
                    f"({len(feature_names)} dummy variables)...")

        if X.shape[1] == 0:
            # Single row and column entity: intercept-only model
            fitted = np.full(n_cells, y.mean())
        else:
            model = PoissonRegressor(alpha=0.0, fit_intercept=True, solver='newton-cholesky',
                                     max_iter=self.max_iter, tol=self.tol)
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter('always', ConvergenceWarning)
                model.fit(X, y)
            for warning in caught:
                logger.warning(f"Poisson fit: {warning.message}")
            fitted = model.predict(X)

        table = table.copy()
        table[EXPECTED] = fitted
        deviance = float(mean_poisson_deviance(y, fitted) * n_cells)

        if self.residuals:
            table = add_residuals(table)
            table = table.sort_values([ROW_ENTITY, COL_ENTITY], kind='mergesort')
            table = table.sort_values(CHI_RESIDUAL, ascending=False, kind='mergesort')
            table = table.reset_index(drop=True)

        logger.info(f"Null model fitted: deviance {deviance:,.2f} on {n_cells:,} cells")
        return NullModelResult(status=ModelStatus.FITTED,
                               table=table,
                               message="fitted",
                               n_cells=n_cells,
                               max_size=self.max_size,
                               deviance=deviance,
                               feature_names=feature_names)
