'''
Tests for relevance module.
'''
import unittest

import numpy as np

from frugal import mrf, relevance


def coupled_model():
    '''
    Hypothesis 0 copies intermediate 1; intermediate 2 is unconnected and
    intermediate 3 leans on 0 too weakly to ever override the coupling.
    '''
    factors = [mrf.Factor([0, 1], np.array([[10.0, 1.0],
                                            [1.0, 10.0]])),
               mrf.Factor([2], np.array([0.3, 0.7])),
               mrf.Factor([0, 3], np.array([[1.0, 1.1, 1.0],
                                            [1.1, 1.0, 1.0]])),
               mrf.Factor([4], np.array([0.5, 0.5]))]
    return mrf.Network(factors)


class TestRelevance(unittest.TestCase):

    def test_exact(self):
        model = coupled_model()
        intermediate = [1, 2, 3]
        evidence = {4: 1}

        self.assertEqual(1.0, relevance.relevance(
            model, 1, evidence, [0], intermediate))
        self.assertEqual(0.0, relevance.relevance(
            model, 2, evidence, [0], intermediate))
        self.assertEqual(0.0, relevance.relevance(
            model, 3, evidence, [0], intermediate))

    def test_any_state_changes(self):
        # Intermediate 1 changes the MPE of 0 only in its middle state.
        factors = [mrf.Factor([0, 1], np.array([[10.0, 1.0, 10.0],
                                                [1.0, 10.0, 1.0]]))]
        model = mrf.Network(factors)
        self.assertEqual(1.0, relevance.relevance(model, 1, {}, [0], [1]))

    def test_sampled(self):
        model = coupled_model()
        rng = np.random.default_rng(2)
        self.assertEqual(1.0, relevance.relevance(
            model, 1, {}, [0], [1, 2, 3, 4], samples=7, rng=rng))
        self.assertEqual(0.0, relevance.relevance(
            model, 2, {}, [0], [1, 2, 3, 4], samples=7, rng=rng))

    def test_node_must_be_intermediate(self):
        model = coupled_model()
        self.assertRaises(ValueError, relevance.relevance,
                          model, 0, {}, [0], [1, 2, 3])

    def test_partition(self):
        model = coupled_model()
        partition = relevance.partition_relevance(
            model, {4: 0}, [0], [1, 2, 3], 0.5)
        self.assertEqual([1], partition.relevant)
        self.assertEqual([2, 3], partition.irrelevant)
        self.assertEqual({1: 1.0, 2: 0.0, 3: 0.0}, partition.scores)


if __name__ == '__main__':
    unittest.main()
