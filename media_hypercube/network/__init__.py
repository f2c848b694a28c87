"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py (network module)

MAIN OBJECTIVE:
---------------
This script initializes the network module, covering the interaction matrix, the Poisson
independence null model and the extraction of filtered graphs.

Dependencies:
-------------
- media_hypercube.network.interaction_matrix
- media_hypercube.network.null_model
- media_hypercube.network.network_extractor

MAIN FEATURES:
--------------
1) Exports InteractionMatrixBuilder
2) Exports NullModelEstimator, build_design_matrix and add_residuals
3) Exports NetworkExtractor

Author:
-------
Antoine Lemor
"""

from media_hypercube.network.interaction_matrix import InteractionMatrixBuilder
from media_hypercube.network.null_model import (
    NullModelEstimator,
    build_design_matrix,
    add_residuals
)
from media_hypercube.network.network_extractor import NetworkExtractor

__all__ = [
    'InteractionMatrixBuilder',
    'NullModelEstimator',
    'build_design_matrix',
    'add_residuals',
    'NetworkExtractor'
]
