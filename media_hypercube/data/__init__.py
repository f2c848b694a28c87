"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py (data module)

MAIN OBJECTIVE:
---------------
This script initializes the data module of the hypercube framework, providing access to the
tagged-document adapter and time bucketing.

Dependencies:
-------------
- media_hypercube.data.processor

MAIN FEATURES:
--------------
1) Exports DocumentProcessor for table to document conversion
2) Exports assign_time_bucket for day/week/month bucketing

Author:
-------
Antoine Lemor
"""

from media_hypercube.data.processor import DocumentProcessor, assign_time_bucket

__all__ = [
    'DocumentProcessor',
    'assign_time_bucket'
]
