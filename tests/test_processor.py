"""
Tests for the document adapter and time buckets.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
import numpy as np
import pandas as pd

from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import TaggedDocument
from media_hypercube.data.processor import DocumentProcessor, assign_time_bucket


class TestAssignTimeBucket(unittest.TestCase):
    """Test time bucketing."""

    def setUp(self):
        """Set up test fixtures."""
        # Sunday, Monday, Wednesday 15:30, next Monday
        self.timestamps = pd.Series([
            pd.Timestamp('2021-02-28'), pd.Timestamp('2021-03-01'),
            pd.Timestamp('2021-03-03 15:30'), pd.Timestamp('2021-03-08')
        ])

    def test_day(self):
        result = assign_time_bucket(self.timestamps, 'day')
        self.assertEqual(result.iloc[2], pd.Timestamp('2021-03-03'))

    def test_week_anchored_to_monday(self):
        result = assign_time_bucket(self.timestamps, 'week')

        self.assertEqual(result.tolist(), [pd.Timestamp('2021-02-22'), pd.Timestamp('2021-03-01'),
                                           pd.Timestamp('2021-03-01'), pd.Timestamp('2021-03-08')])

    def test_month(self):
        result = assign_time_bucket(self.timestamps, 'month')

        self.assertEqual(result.tolist(), [pd.Timestamp('2021-02-01')] + [pd.Timestamp('2021-03-01')] * 3)

    def test_timezone_dropped(self):
        timestamps = pd.Series(pd.to_datetime(['2021-03-03 23:00']).tz_localize('UTC'))
        result = assign_time_bucket(timestamps, 'day')

        self.assertIsNone(result.dt.tz)
        self.assertEqual(result.iloc[0], pd.Timestamp('2021-03-03'))

    def test_unknown_resolution(self):
        with self.assertRaises(ValidationError):
            assign_time_bucket(self.timestamps, 'year')


class TestTaggedDocument(unittest.TestCase):
    """Test that tagged documents are immutable."""

    def setUp(self):
        """Set up test fixtures."""
        self.doc = TaggedDocument('d1', 'lemonde', '2021-01-01', {'migrant'}, {'FRA'}, {'ITA'},
                                  extra_tags={'keywords': ['border']})

    def test_hashable(self):
        same = TaggedDocument('d1', 'lemonde', '2021-01-01', {'migrant'}, {'FRA'}, {'ITA'},
                              extra_tags={'keywords': ['border']})

        self.assertEqual(hash(self.doc), hash(same))
        self.assertEqual(len({self.doc, same}), 1)

    def test_extra_tags_read_only(self):
        with self.assertRaises(TypeError):
            self.doc.extra_tags['injected'] = frozenset({'x'})
        self.assertEqual(set(self.doc.extra_tags), {'keywords'})

    def test_fields_frozen(self):
        with self.assertRaises(AttributeError):
            self.doc.source = 'guardian'


class TestDocumentProcessor(unittest.TestCase):
    """Test DocumentProcessor."""

    def setUp(self):
        """Set up test fixtures."""
        self.processor = DocumentProcessor()
        self.df = pd.DataFrame({
            'id': ['a1', 'a2', 'a3'],
            'source': ['lemonde', 'lemonde', 'guardian'],
            'timestamp': ['2021-03-01', '2021-03-02', '2021-03-03'],
            'topic_tags': ['migrant|refugee', '', None],
            'geo_tags_a': [['FRA', 'ITA'], [], np.nan],
            'geo_tags_b': ['FRA', ' ITA | ', 'GBR'],
            'keywords': ['border', None, 'asylum|border'],
        })

    def test_from_frame(self):
        documents = self.processor.from_frame(self.df)

        self.assertEqual(len(documents), 3)
        first = documents[0]
        self.assertEqual(first.topic_tags, frozenset({'migrant', 'refugee'}))
        self.assertEqual(first.geo_tags_a, frozenset({'FRA', 'ITA'}))
        self.assertEqual(first.timestamp, pd.Timestamp('2021-03-01'))
        self.assertEqual(documents[1].geo_tags_b, frozenset({'ITA'}))
        self.assertEqual(documents[2].topic_tags, frozenset())
        self.assertEqual(documents[2].geo_tags_a, frozenset())

    def test_extra_tag_columns(self):
        documents = self.processor.from_frame(self.df, extra_tag_columns=['keywords'])

        self.assertEqual(documents[2].tag_set('keywords'), frozenset({'asylum', 'border'}))
        self.assertEqual(documents[1].tag_set('keywords'), frozenset())

    def test_parse_tags(self):
        self.assertEqual(self.processor.parse_tags('FRA|ITA'), ['FRA', 'ITA'])
        self.assertEqual(self.processor.parse_tags(None), [])
        self.assertEqual(self.processor.parse_tags(float('nan')), [])
        self.assertEqual(self.processor.parse_tags(('FRA', None)), ['FRA'])
        self.assertEqual(DocumentProcessor(separator=';').parse_tags('FRA;ITA'), ['FRA', 'ITA'])

    def test_missing_columns(self):
        with self.assertRaises(SchemaError):
            self.processor.from_frame(self.df.drop(columns=['geo_tags_b']))

    def test_duplicated_ids(self):
        df = self.df.copy()
        df.loc[2, 'id'] = 'a1'
        with self.assertRaises(SchemaError):
            self.processor.from_frame(df)

    def test_invalid_timestamp(self):
        df = self.df.copy()
        df.loc[0, 'timestamp'] = None
        with self.assertRaises(SchemaError):
            self.processor.from_frame(df)

    def test_to_frame(self):
        documents = [
            TaggedDocument('d1', 'lemonde', '2021-03-01', {'refugee', 'migrant'}, {'FRA'}, set()),
        ]
        df = self.processor.to_frame(documents)

        self.assertEqual(df.loc[0, 'topic_tags'], 'migrant|refugee')
        self.assertEqual(df.loc[0, 'geo_tags_b'], '')
        self.assertEqual(self.processor.from_frame(df)[0], documents[0])


if __name__ == '__main__':
    unittest.main()
