'''
Tests for uai module.
'''
import io
import unittest

import numpy as np

from frugal import uai
from frugal.tests.stubs import joint_table

MARKOV_UAI = '''MARKOV
3
2 2 3
3
1 0
2 0 1
2 1 2

2
 0.436 0.564

4
 0.128 0.872
 0.920 0.080

6
 0.210 0.333 0.457
 0.811 0.000 0.189
'''

BAYES_UAI = '''BAYES
2
2 2
2
1 0
2 0 1

2
 0.25 0.75

4
 0.9 0.1
 0.3 0.7
'''


class TestLoad(unittest.TestCase):

    def test_markov(self):
        network = uai.load(io.StringIO(MARKOV_UAI))

        self.assertEqual([0, 1, 2], network.names)
        self.assertEqual([2, 2, 3], network.nstates)
        self.assertEqual(3, len(network.factors))
        self.assertEqual([1, 2], network.factors[2].names)
        np.testing.assert_allclose([[0.210, 0.333, 0.457],
                                    [0.811, 0.000, 0.189]],
                                   network.factors[2].table)
        self.assertEqual({}, network.evidence)

    def test_bayes(self):
        network = uai.load(BAYES_UAI.splitlines())

        self.assertEqual([0, 1], network.names)
        # Conditional tables are plain factors; the joint sums to one.
        joint = joint_table(network)
        self.assertAlmostEqual(0.25 * 0.9, joint[0, 0])
        self.assertAlmostEqual(0.75 * 0.7, joint[1, 1])
        self.assertAlmostEqual(1.0, np.sum(joint))

    def test_malformed(self):
        self.assertRaises(ValueError, uai.load,
                          io.StringIO(MARKOV_UAI.replace('MARKOV', 'CSP')))
        self.assertRaises(ValueError, uai.load,
                          io.StringIO(MARKOV_UAI.replace('\n6\n', '\n5\n')))
        self.assertRaises(ValueError, uai.load,
                          io.StringIO(MARKOV_UAI[:MARKOV_UAI.rindex('0.811')]))

    def test_dump_then_load(self):
        network = uai.load(io.StringIO(MARKOV_UAI))
        out = io.StringIO()
        uai.dump(network, out)

        reloaded = uai.load(io.StringIO(out.getvalue()))
        self.assertEqual(network.nstates, reloaded.nstates)
        for fac, fac_re in zip(network.factors, reloaded.factors):
            self.assertEqual(fac.names, fac_re.names)
            np.testing.assert_allclose(fac.table, fac_re.table)


class TestEvidence(unittest.TestCase):

    def test_read_evidence(self):
        self.assertEqual({0: 1, 2: 2},
                         uai.read_evidence(io.StringIO('2\n0 1\n2 2\n')))
        self.assertEqual({}, uai.read_evidence(io.StringIO('')))
        self.assertEqual({}, uai.read_evidence(io.StringIO('0\n')))

    def test_malformed_evidence(self):
        self.assertRaises(ValueError, uai.read_evidence,
                          io.StringIO('2 0 1 2'))

    def test_with_evidence(self):
        network = uai.load(io.StringIO(MARKOV_UAI))
        conditioned, evidence = uai.with_evidence(network,
                                                  io.StringIO('1 2 0'))
        self.assertEqual({2: 0}, evidence)
        self.assertEqual({2: 0}, conditioned.evidence)
        self.assertEqual({}, network.evidence)
        self.assertTrue(conditioned.factors is network.factors)

    def test_evidence_out_of_range(self):
        network = uai.load(io.StringIO(MARKOV_UAI))
        self.assertRaises(ValueError, uai.with_evidence, network,
                          io.StringIO('1 2 3'))


if __name__ == '__main__':
    unittest.main()
