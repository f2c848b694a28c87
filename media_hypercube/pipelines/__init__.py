"""
PROJECT:
-------
media-hypercube

TITLE:
------
__init__.py (pipelines module)

MAIN OBJECTIVE:
---------------
This script initializes the pipelines module, exposing the end-to-end hypercube pipeline.

Dependencies:
-------------
- media_hypercube.pipelines.hypercube_pipeline

MAIN FEATURES:
--------------
1) Exports HypercubePipeline and PipelineResults

Author:
-------
Antoine Lemor
"""

from media_hypercube.pipelines.hypercube_pipeline import HypercubePipeline, PipelineResults

__all__ = [
    'HypercubePipeline',
    'PipelineResults'
]
