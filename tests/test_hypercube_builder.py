"""
Tests for HypercubeBuilder and the Hypercube table.

Tests verify the weight-conserving expansion of documents into hypercube rows.
"""

import sys
from pathlib import Path
# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
import tempfile
import shutil
import pandas as pd
import numpy as np

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import TaggedDocument, TagSelector
from media_hypercube.hypercube.builder import HypercubeBuilder, expand_document
from media_hypercube.hypercube.hypercube import Hypercube


class TestExpandDocument(unittest.TestCase):
    """Test the expansion of a single document."""

    def test_cartesian_rows_and_weights(self):
        """a*b*c rows, each weighing 1/(a*b*c)."""
        doc = TaggedDocument(
            doc_id='d1', source='lemonde', timestamp='2021-03-03',
            topic_tags={'migrant', 'refugee'},
            geo_tags_a={'FRA', 'ITA', 'DEU'},
            geo_tags_b={'TUR', 'GRC'}
        )
        rows = expand_document(doc, TagSelector())

        self.assertEqual(len(rows), 2 * 3 * 2)
        for _, _, _, weight in rows:
            self.assertAlmostEqual(weight, 1 / 12)
        self.assertAlmostEqual(sum(r[3] for r in rows), 1.0)

    def test_empty_tag_sets_yield_one_row(self):
        """A document without tags still appears once."""
        doc = TaggedDocument(doc_id='d1', source='lemonde', timestamp='2021-03-03')
        rows = expand_document(doc, TagSelector())

        self.assertEqual(rows, [(None, None, None, 1.0)])

    def test_partial_empty(self):
        """Only the empty dimension is replaced by a missing value."""
        doc = TaggedDocument(doc_id='d1', source='lemonde', timestamp='2021-03-03',
                             geo_tags_a={'FRA', 'ITA'})
        rows = expand_document(doc, TagSelector())

        self.assertEqual(len(rows), 2)
        self.assertTrue(all(r[0] is None and r[2] is None for r in rows))
        self.assertEqual(sorted(r[1] for r in rows), ['FRA', 'ITA'])
        self.assertAlmostEqual(sum(r[3] for r in rows), 1.0)

    def test_unknown_selector_field(self):
        """Selecting a missing tag field fails."""
        doc = TaggedDocument(doc_id='d1', source='lemonde', timestamp='2021-03-03')
        with self.assertRaises(SchemaError):
            expand_document(doc, TagSelector(topic='keywords'))

    def test_extra_tag_field(self):
        """Extra tag fields can play a role."""
        doc = TaggedDocument(doc_id='d1', source='lemonde', timestamp='2021-03-03',
                             extra_tags={'keywords': ['border', 'asylum']})
        rows = expand_document(doc, TagSelector(topic='keywords'))

        self.assertEqual(sorted(r[0] for r in rows), ['asylum', 'border'])


class TestHypercubeBuilder(unittest.TestCase):
    """Test HypercubeBuilder."""

    def setUp(self):
        """Set up test fixtures."""
        self.documents = [
            TaggedDocument('d1', 'lemonde', '2021-03-01', {'migrant'}, {'FRA', 'ITA'}, {'FRA', 'ITA'}),
            TaggedDocument('d2', 'lemonde', '2021-03-03', set(), {'FRA'}, {'FRA'}),
            TaggedDocument('d3', 'guardian', '2021-03-09', {'migrant', 'refugee'}, {'GBR'}, set()),
            TaggedDocument('d4', 'guardian', '2021-03-10', set(), set(), set()),
            TaggedDocument('d5', 'guardian', '2021-04-02', {'refugee'}, {'GBR', 'FRA', 'ITA'}, {'GBR'}),
        ]
        self.builder = HypercubeBuilder(HypercubeConfig(time_bucket='week'))

    def test_total_mass_equals_document_count(self):
        """Weight conservation over the whole corpus."""
        hypercube = self.builder.build(self.documents)

        self.assertAlmostEqual(hypercube.n_documents, len(self.documents))
        self.assertAlmostEqual(hypercube.frame['news_weight'].sum(), 5.0)

    def test_mass_is_exact_for_large_expansions(self):
        """A 3 x 7 x 5 document still weighs exactly one."""
        doc = TaggedDocument('big', 'lemonde', '2021-03-01',
                             {f't{n}' for n in range(3)},
                             {f'a{n}' for n in range(7)},
                             {f'b{n}' for n in range(5)})
        hypercube = self.builder.build([doc])

        self.assertEqual(len(hypercube), 105)
        self.assertEqual(hypercube.n_documents, 1.0)

    def test_tag_count(self):
        """tag_count sums the expansion rows."""
        hypercube = self.builder.build(self.documents)

        # d1: 1*2*2, d2: 1, d3: 2*1*1, d4: 1, d5: 1*3*1
        self.assertEqual(hypercube.frame['tag_count'].sum(), 4 + 1 + 2 + 1 + 3)

    def test_missing_tags_are_not_strings(self):
        """Documents without tags are kept with missing values."""
        hypercube = self.builder.build(self.documents)
        frame = hypercube.frame

        untagged = frame[frame['topic'].isna() & frame['geo_a'].isna() & frame['geo_b'].isna()]
        self.assertEqual(len(untagged), 1)
        self.assertAlmostEqual(untagged['news_weight'].iloc[0], 1.0)
        self.assertFalse((frame['topic'] == 'NONE').fillna(False).any())

    def test_week_buckets_start_on_monday(self):
        """Weekly buckets are anchored to Monday."""
        hypercube = self.builder.build(self.documents)
        buckets = hypercube.dimension_values('time_bucket')

        self.assertEqual(buckets, [pd.Timestamp('2021-03-01'),
                                   pd.Timestamp('2021-03-08'),
                                   pd.Timestamp('2021-03-29')])
        self.assertTrue(all(b.dayofweek == 0 for b in buckets))

    def test_month_buckets(self):
        """Monthly buckets start on the first day of the month."""
        hypercube = self.builder.build(self.documents, time_bucket='month')

        self.assertEqual(hypercube.dimension_values('time_bucket'),
                         [pd.Timestamp('2021-03-01'), pd.Timestamp('2021-04-01')])
        self.assertEqual(hypercube.time_bucket, 'month')

    def test_aggregation_merges_identical_keys(self):
        """Rows of different documents with the same key are summed."""
        documents = [
            TaggedDocument('a', 'lemonde', '2021-03-01', {'migrant'}, {'FRA'}, {'ITA'}),
            TaggedDocument('b', 'lemonde', '2021-03-02', {'migrant'}, {'FRA'}, {'ITA'}),
        ]
        hypercube = self.builder.build(documents)

        self.assertEqual(len(hypercube), 1)
        self.assertEqual(hypercube.frame['tag_count'].iloc[0], 2)
        self.assertAlmostEqual(hypercube.frame['news_weight'].iloc[0], 2.0)

    def test_same_field_for_both_geo_roles(self):
        """Co-mentions of one field give self pairs and cross pairs."""
        selector = TagSelector(geo_a='geo_tags_a', geo_b='geo_tags_a')
        hypercube = self.builder.build(self.documents[:1], selector=selector)
        frame = hypercube.frame

        pairs = set(zip(frame['geo_a'], frame['geo_b']))
        self.assertEqual(pairs, {('FRA', 'FRA'), ('FRA', 'ITA'), ('ITA', 'FRA'), ('ITA', 'ITA')})
        np.testing.assert_allclose(frame['news_weight'], 0.25)

    def test_duplicate_ids_rejected(self):
        """Duplicated ids are a schema error."""
        documents = self.documents + [
            TaggedDocument('d1', 'lemonde', '2021-03-01', set(), set(), set())
        ]
        with self.assertRaises(SchemaError):
            self.builder.build(documents)

    def test_unknown_time_bucket(self):
        """Unknown resolutions fail fast."""
        with self.assertRaises(ValidationError):
            self.builder.build(self.documents, time_bucket='year')

    def test_empty_corpus(self):
        """No document gives an empty hypercube."""
        hypercube = self.builder.build([])

        self.assertTrue(hypercube.is_empty)
        self.assertEqual(hypercube.n_documents, 0.0)

    def test_deterministic(self):
        """Same input, same table."""
        first = self.builder.build(self.documents)
        second = self.builder.build(list(reversed(self.documents)))

        self.assertTrue(first.equals(second))


class TestHypercubeTable(unittest.TestCase):
    """Test Hypercube schema and persistence."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        documents = [
            TaggedDocument('d1', 'NA', '2021-03-01', {'migrant'}, {'FRA', 'ITA'}, set()),
            TaggedDocument('d2', 'guardian', '2021-03-03', set(), {'GBR'}, {'FRA'}),
        ]
        self.hypercube = HypercubeBuilder(HypercubeConfig(time_bucket='day')).build(documents)

    def tearDown(self):
        """Clean up."""
        shutil.rmtree(self.temp_dir)

    def test_missing_columns_rejected(self):
        """Construction validates the schema."""
        with self.assertRaises(SchemaError):
            Hypercube(pd.DataFrame({'source': ['a'], 'news_weight': [1.0]}))

    def test_unknown_dimension(self):
        """Dimension names are validated."""
        with self.assertRaises(ValidationError):
            self.hypercube.dimension_values('media')

    def test_csv_persistence_keeps_missing_tags(self):
        """Missing tags survive a CSV save/load; a source named NA stays a string."""
        path = Path(self.temp_dir) / 'hypercube.csv'
        self.hypercube.save(path, format='csv')
        loaded = Hypercube.load(path, format='csv', time_bucket='day')

        self.assertTrue(loaded.equals(self.hypercube))
        self.assertIn('NA', loaded.dimension_values('source'))

    def test_summary(self):
        """Summary reports mass and cardinalities."""
        summary = self.hypercube.summary()

        self.assertAlmostEqual(summary['n_documents'], 2.0)
        self.assertEqual(summary['n_sources'], 2)
        self.assertEqual(summary['n_geo_a'], 3)
        self.assertEqual(summary['date_range']['start'], '2021-03-01T00:00:00')


if __name__ == '__main__':
    unittest.main()
