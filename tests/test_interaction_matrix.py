"""
Tests for InteractionMatrixBuilder.
"""

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
import warnings
import pandas as pd

from media_hypercube.core.config import HypercubeConfig
from media_hypercube.core.exceptions import SchemaError, ValidationError
from media_hypercube.core.models import TaggedDocument
from media_hypercube.hypercube.builder import HypercubeBuilder
from media_hypercube.network.interaction_matrix import InteractionMatrixBuilder


def triples(rows):
    return pd.DataFrame(rows, columns=['i', 'j', 'Fij'])


def as_set(table):
    return set(zip(table['i'], table['j'], table['Fij']))


class TestInteractionMatrixBuilder(unittest.TestCase):
    """Test thresholds and melting."""

    def test_documented_example(self):
        """Column Z fails s2; X and W survive."""
        builder = InteractionMatrixBuilder(s1=3, s2=3, n1=1, n2=1, k=1)
        result = builder.build(triples([('X', 'Y', 3), ('X', 'Z', 1), ('W', 'Y', 5)]))

        self.assertEqual(as_set(result), {('X', 'Y', 3.0), ('W', 'Y', 5.0)})
        self.assertEqual(list(result.columns), ['i', 'j', 'Fij'])

    def test_duplicates_are_summed(self):
        """Repeated pairs are summed in the matrix."""
        builder = InteractionMatrixBuilder(s1=0, s2=0, n1=0, n2=0, k=1)
        result = builder.build(triples([('A', 'B', 1), ('A', 'B', 2.5)]))

        self.assertEqual(as_set(result), {('A', 'B', 3.5)})

    def test_missing_cells_are_zero(self):
        """Surviving submatrix is dense."""
        builder = InteractionMatrixBuilder(s1=0, s2=0, n1=0, n2=0, k=1)
        result = builder.build(triples([('A', 'X', 1), ('B', 'Y', 2)]))

        self.assertEqual(as_set(result), {('A', 'X', 1.0), ('A', 'Y', 0.0),
                                          ('B', 'X', 0.0), ('B', 'Y', 2.0)})
        self.assertEqual(list(zip(result['i'], result['j'])),
                         [('A', 'X'), ('A', 'Y'), ('B', 'X'), ('B', 'Y')])

    def test_degree_threshold(self):
        """Binarized degree below n1 removes a row."""
        builder = InteractionMatrixBuilder(s1=0, s2=0, n1=2, n2=0, k=2)
        result = builder.build(triples([
            ('A', 'X', 5), ('A', 'Y', 5),
            ('B', 'X', 5), ('B', 'Y', 1),
        ]))

        self.assertEqual(set(result['i']), {'A'})

    def test_single_pass_keeps_under_threshold_row(self):
        """Rows are not re-checked after columns are removed."""
        rows = triples([('A', 'X', 2), ('A', 'Y', 2), ('B', 'X', 5)])
        single = InteractionMatrixBuilder(s1=3, s2=3, n1=0, n2=0, k=1).build(rows)

        # Y (sum 2) is dropped, leaving A with mass 2 < s1
        self.assertEqual(as_set(single), {('A', 'X', 2.0), ('B', 'X', 5.0)})

    def test_iterative_fixpoint(self):
        """The iterative variant removes rows until stable."""
        rows = triples([('A', 'X', 2), ('A', 'Y', 2), ('B', 'X', 5)])
        iterative = InteractionMatrixBuilder(s1=3, s2=3, n1=0, n2=0, k=1, iterative=True).build(rows)

        self.assertEqual(as_set(iterative), {('B', 'X', 5.0)})

    def test_everything_filtered(self):
        """Empty survival gives an empty table with the triple columns."""
        builder = InteractionMatrixBuilder(s1=100, s2=100)
        result = builder.build(triples([('A', 'B', 1)]))

        self.assertTrue(result.empty)
        self.assertEqual(list(result.columns), ['i', 'j', 'Fij'])

    def test_from_hypercube(self):
        """geo A x geo B of a hypercube; untagged sides are dropped."""
        documents = [
            TaggedDocument('d1', 'lemonde', '2021-03-01', set(), {'FRA', 'ITA'}, {'FRA', 'ITA'}),
            TaggedDocument('d2', 'lemonde', '2021-03-01', set(), {'FRA'}, set()),
        ]
        hypercube = HypercubeBuilder(HypercubeConfig()).build(documents)
        builder = InteractionMatrixBuilder(s1=0, s2=0, n1=0, n2=0, k=1)
        result = builder.build(hypercube)

        self.assertEqual(as_set(result), {('FRA', 'FRA', 0.25), ('FRA', 'ITA', 0.25),
                                          ('ITA', 'FRA', 0.25), ('ITA', 'ITA', 0.25)})

    def test_untagged_rows_dropped_without_warnings(self):
        """Dropping untagged pairs works on a copy, not a slice."""
        rows = pd.DataFrame({'i': ['A', None, 'B'], 'j': ['X', 'X', None], 'Fij': [1, 2, 3]})
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            pairs = InteractionMatrixBuilder().pairs(rows)

        self.assertEqual(pairs.values.tolist(), [['A', 'X', 1.0]])

    def test_tag_count_measure(self):
        """The matrix can sum tag counts instead of news weight."""
        documents = [
            TaggedDocument('d1', 'lemonde', '2021-03-01', set(), {'FRA', 'ITA'}, {'ESP'}),
        ]
        hypercube = HypercubeBuilder(HypercubeConfig()).build(documents)
        builder = InteractionMatrixBuilder(s1=0, s2=0, n1=0, n2=0, k=1, measure='tag_count')

        self.assertEqual(as_set(builder.build(hypercube)), {('FRA', 'ESP', 1.0), ('ITA', 'ESP', 1.0)})

    def test_from_config(self):
        """Defaults come from the configuration."""
        builder = InteractionMatrixBuilder.from_config(HypercubeConfig(s1=7, iterative=True))

        self.assertEqual(builder.s1, 7)
        self.assertTrue(builder.iterative)

    def test_negative_threshold(self):
        with self.assertRaises(ValidationError):
            InteractionMatrixBuilder(s1=-1)

    def test_missing_columns(self):
        with self.assertRaises(SchemaError):
            InteractionMatrixBuilder().build(pd.DataFrame({'i': ['A'], 'j': ['B']}))


if __name__ == '__main__':
    unittest.main()
