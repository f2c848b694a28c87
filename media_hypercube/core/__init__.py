"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py (core module)

MAIN OBJECTIVE:
---------------
This script initializes the core module of the hypercube framework, exposing the main
configuration, models, exceptions and constants for use throughout the framework.

Dependencies:
-------------
- media_hypercube.core.config
- media_hypercube.core.models
- media_hypercube.core.constants
- media_hypercube.core.exceptions

MAIN FEATURES:
--------------
1) Exports HypercubeConfig for configuration management
2) Exports all data models (TaggedDocument, SalienceRecord, NetworkGraph, etc.)
3) Exports the exception hierarchy
4) Provides clean API for core components

Author:
-------
Antoine Lemor
"""

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.models import (
    TaggedDocument,
    TagSelector,
    TopicSelector,
    SalienceRecord,
    ModelStatus,
    NullModelResult,
    NetworkGraph
)
from media_hypercube.core.constants import HypercubeDimension
from media_hypercube.core.exceptions import (
    HypercubeError,
    ConfigurationError,
    SchemaError,
    ValidationError
)

__all__ = [
    'HypercubeConfig',
    'TaggedDocument',
    'TagSelector',
    'TopicSelector',
    'SalienceRecord',
    'ModelStatus',
    'NullModelResult',
    'NetworkGraph',
    'HypercubeDimension',
    'HypercubeError',
    'ConfigurationError',
    'SchemaError',
    'ValidationError'
]
