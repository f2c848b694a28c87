"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py (hypercube module)

MAIN OBJECTIVE:
---------------
This script initializes the hypercube module, providing the aggregated fact table, its
builder from tagged documents and its declarative row filter.

Dependencies:
-------------
- media_hypercube.hypercube.hypercube
- media_hypercube.hypercube.builder
- media_hypercube.hypercube.filters

MAIN FEATURES:
--------------
1) Exports Hypercube, the read-only aggregated table
2) Exports HypercubeBuilder and expand_document
3) Exports HypercubeFilter

Author:
-------
Antoine Lemor
"""

from media_hypercube.hypercube.hypercube import Hypercube
from media_hypercube.hypercube.builder import HypercubeBuilder, expand_document
from media_hypercube.hypercube.filters import HypercubeFilter

__all__ = [
    'Hypercube',
    'HypercubeBuilder',
    'expand_document',
    'HypercubeFilter'
]
