"""
PROJECT:
-------
media-hypercube

TITLE:
------
exceptions.py

MAIN OBJECTIVE:
---------------
This script defines custom exception classes for the hypercube framework. Only programmer
errors are raised (malformed schemas, invalid thresholds); expected data conditions are
reported as result state by each stage.

Dependencies:
-------------
None

MAIN FEATURES:
--------------
1) Base HypercubeError exception class
2) Configuration and schema errors
3) Argument validation errors

Author:
-------
Antoine Lemor
"""


class HypercubeError(Exception):
    """Base exception for the hypercube framework."""
    pass


class ConfigurationError(HypercubeError):
    """Configuration-related errors."""
    pass


class SchemaError(HypercubeError):
    """Malformed document or table schema."""
    pass


class ValidationError(HypercubeError):
    """Invalid argument or threshold."""
    pass

