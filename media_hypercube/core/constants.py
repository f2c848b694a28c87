"""
PROJECT:
-------
media-hypercube

TITLE:
------
constants.py

MAIN OBJECTIVE:
---------------
This script defines global constants used throughout the hypercube framework, including
column names of every table, time-bucket resolutions and the default thresholds of each
analysis stage.

Dependencies:
-------------
- enum

MAIN FEATURES:
--------------
1) Hypercube dimensions and measure column names
2) Tag field names of tagged documents
3) Time-bucket resolutions (day, week, month)
4) Default salience, matrix, null-model and network thresholds
5) Serialization formats

Author:
-------
Antoine Lemor
"""

from enum import Enum


class HypercubeDimension(str, Enum):
    """Grouping dimensions of the hypercube."""
    SEQUENCE = 'sequence'
    SOURCE = 'source'
    TIME = 'time_bucket'
    TOPIC = 'topic'
    GEO_A = 'geo_a'
    GEO_B = 'geo_b'


# Hypercube key columns, in aggregation order
KEY_COLUMNS = [d.value for d in HypercubeDimension]

# Measures
TAG_COUNT = 'tag_count'
NEWS_WEIGHT = 'news_weight'
MEASURE_COLUMNS = [TAG_COUNT, NEWS_WEIGHT]

HYPERCUBE_COLUMNS = KEY_COLUMNS + MEASURE_COLUMNS

# Dimensions holding tag values (missing value = no tag)
TAG_DIMENSIONS = [HypercubeDimension.TOPIC.value,
                  HypercubeDimension.GEO_A.value,
                  HypercubeDimension.GEO_B.value]

# Tag fields of a TaggedDocument
TOPIC_TAGS = 'topic_tags'
GEO_TAGS_A = 'geo_tags_a'
GEO_TAGS_B = 'geo_tags_b'
DOCUMENT_TAG_FIELDS = [TOPIC_TAGS, GEO_TAGS_A, GEO_TAGS_B]

# Input table columns accepted by the document adapter
DOCUMENT_COLUMNS = ['id', 'source', 'timestamp', TOPIC_TAGS, GEO_TAGS_A, GEO_TAGS_B]
TAG_SEPARATOR = '|'

# Time buckets (weeks anchored to Monday)
TIME_BUCKETS = ['day', 'week', 'month']
DEFAULT_TIME_BUCKET = 'week'

# Salience table columns
SALIENCE_INPUT_COLUMNS = ['key', 'trial', 'success', 'null_value']
SALIENCE_OUTPUT_COLUMNS = SALIENCE_INPUT_COLUMNS + ['estimate', 'salience', 'statistic', 'p_value']
ALTERNATIVES = ['greater', 'less', 'two-sided']
ORDER_MODES = ['salience', 'p_value']

# Salience gates
MIN_SAMPLE = 20
MIN_EXPECTED = 5.0

# Interaction matrix columns and thresholds
ROW_ENTITY = 'i'
COL_ENTITY = 'j'
FLOW = 'Fij'
INTERACTION_COLUMNS = [ROW_ENTITY, COL_ENTITY, FLOW]
MIN_ROW_MASS = 3.0       # s1
MIN_COL_MASS = 3.0       # s2
MIN_ROW_DEGREE = 1       # n1
MIN_COL_DEGREE = 1       # n2
BINARY_CUTOFF = 1.0      # k

# Null model
EXPECTED = 'Eij'
ABS_RESIDUAL = 'abs_residual'
REL_RESIDUAL = 'rel_residual'
CHI_RESIDUAL = 'chi_residual'
MAX_MODEL_SIZE = 10000

# Network
NETWORK_MIN_SIZE = 1.0
NETWORK_MIN_TEST = 3.84  # chi2(1) at 5%
NODE_COLUMNS = ['id', 'code', 'label', 'mass', 'is_target']
EDGE_COLUMNS = ['source', 'target', 'size', 'test', 'width']

# Geographic reference table
REFERENCE_COLUMNS = ['entity_code', 'display_name', 'longitude', 'latitude']

# Serialization
SAVE_FORMATS = ['csv', 'pickle', 'json']
