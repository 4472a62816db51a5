'''
Tests for ve module.
'''
import itertools as its
import unittest

import numpy as np

from frugal import mrf, ve
from frugal.tests.stubs import joint_table


def simple_model():

    variables = [0, 1, 2, 3, 4]
    factors = (([0, 1], np.array([[1.0, 2.0],
                                  [3.0, 4.0],
                                  [5.0, 6.0]])),
               ([1, 2, 3], np.array([[[1.0, 2.0],
                                      [3.0, 4.0],
                                      [5.0, 6.0]],
                                     [[1.3, 2.3],
                                      [3.3, 4.3],
                                      [5.3, 6.3]]])),
               ([1], np.array([0.1, 0.9])),
               ([1, 4], np.array([[0.2, 0.3],
                                  [0.4, 0.5]])))
    factors = [mrf.Factor(my_variables, data)
               for my_variables, data in factors]
    unnormalized = mrf.Network(factors, names_order=variables)
    return mrf.Network(factors, alpha=np.sum(joint_table(unnormalized)),
                       names_order=variables)


def brute_force_table(model, scope, evidence):
    ''' Table over scope with the evidence held constant. '''
    joint = joint_table(model)
    table = np.zeros([model.cardinality(var) for var in scope])
    ranges = [range(n) if var not in evidence else [evidence[var]]
              for var, n in zip(model.names, model.nstates)]
    for perm in its.product(*ranges):
        perm_dict = dict(zip(model.names, perm))
        table[tuple(perm_dict[var] for var in scope)] += joint[perm]
    return table


class TestVe(unittest.TestCase):
    ''' Tests for variable elimination. '''

    def cmb_partition_gen(self, model):
        '''
        Split model into all combinations of partitions of size [2, len - 1].

        :return tuple[list, list]: All possible combinations of variables of
        length 2 to (len(network.names) - 1) with the remaining variables in
        the final list.
        '''
        for lt_len in range(2, len(model.names)):
            for left_partition in its.combinations(model.names, lt_len):
                right_partition = tuple(var for var in model.names
                                        if var not in left_partition)
                yield list(left_partition), list(right_partition)

    def test_eliminate(self):

        model = simple_model()
        factors_copy = [(list(factor.names), np.copy(factor.table))
                        for factor in model.factors]
        var_to_nstates = dict((var, nstates)
                              for var, nstates in
                              zip(model.names, model.nstates))

        # Test every possible elimination.
        for elim_vars, elim_names in self.cmb_partition_gen(model):

            elim_model = ve.eliminate(model, elim_vars)
            elim_nstates = [var_to_nstates[var] for var in elim_names]

            self.assertEqual(elim_names, elim_model.names)
            self.assertEqual(elim_nstates, elim_model.nstates)

            table_expected = brute_force_table(model, elim_names, {})

            # Model sums to 1.
            self.assertAlmostEqual(1.0, np.sum(table_expected))

            # Eliminated model matches and sums to 1.
            table_actual = joint_table(elim_model)
            np.testing.assert_allclose(table_expected, table_actual)
            self.assertAlmostEqual(1.0, np.sum(table_actual))

            # Original model is unchanged.
            self.assertEqual(len(factors_copy), len(model.factors))
            for (names, table), factor in zip(factors_copy, model.factors):
                self.assertEqual(names, factor.names)
                np.testing.assert_array_equal(table, factor.table)

    def test_eliminate_everything_keeps_mass(self):
        model = simple_model()
        model = mrf.Network(model.factors, alpha=model.alpha * 0.5,
                            names_order=model.names)
        elim_model = ve.eliminate(model, list(model.names))
        self.assertEqual([], elim_model.names)
        self.assertAlmostEqual(0.5, elim_model.alpha)

    def test_condition_eliminate_eq_eliminate(self):

        model = simple_model()

        # Test that condition_eliminate() without any conditioning is equal to
        # elimination only.
        for elim_vars, elim_names in self.cmb_partition_gen(model):

            elim_model = ve.eliminate(model, elim_vars)
            cond_elim_model = ve.condition_eliminate(
                model, elim_model.names, {}, elim_vars)

            self.assertEqual(elim_model.names, cond_elim_model.names)
            self.assertEqual(elim_model.nstates, cond_elim_model.nstates)
            np.testing.assert_allclose(joint_table(elim_model),
                                       joint_table(cond_elim_model))

    def test_condition_eliminate(self):

        model = simple_model()
        var_to_nstates = dict(zip(model.names, model.nstates))

        def partition_scope_gen(non_cond_names):
            for num_scope in range(1, len(non_cond_names) + 1):
                for scope in its.combinations(non_cond_names, num_scope):
                    elim_vars = [var for var in non_cond_names
                                 if var not in scope]
                    yield list(scope), elim_vars

        # Test elimination with conditioning.
        for cond_names, non_cond_names in self.cmb_partition_gen(model):

            for scope, elim_vars in partition_scope_gen(non_cond_names):
                cond_nstates = [var_to_nstates[var] for var in cond_names]

                for cond_perm in its.product(*[range(n) for n in cond_nstates]):
                    evidence = dict(zip(cond_names, cond_perm))

                    cond_elim_model = ve.condition_eliminate(
                        model, scope, evidence, model.names)
                    self.assertEqual(scope, cond_elim_model.names)

                    table_expected = brute_force_table(model, scope, evidence)
                    table_expected /= np.sum(table_expected)
                    table_actual = joint_table(cond_elim_model)
                    table_actual /= np.sum(table_actual)

                    np.testing.assert_allclose(table_expected, table_actual)


    def test_condition_eliminate_rejects_overlap(self):
        model = simple_model()
        self.assertRaises(ValueError, ve.condition_eliminate,
                          model, [0], {0: 1}, model.names)
        self.assertRaises(ValueError, ve.condition_eliminate,
                          model, [0], {}, [])

    def test_marginal(self):
        model = simple_model()
        for evidence in [{}, {1: 0}, {2: 2, 4: 1}]:
            clamped = model.given(evidence)
            free = [var for var in model.names if var not in evidence]
            for size in (1, 2):
                for scope in its.permutations(free, size):
                    belief = ve.marginal(clamped, list(scope))
                    expected = brute_force_table(model, scope, evidence)
                    expected /= np.sum(expected)
                    self.assertEqual(list(scope), belief.names)
                    np.testing.assert_allclose(expected, belief.table)

    def test_map_assignment(self):
        model = simple_model()
        for evidence in [{}, {0: 2}, {1: 1, 3: 0}]:
            hypothesis = [var for var in (2, 4, 0) if var not in evidence]
            table = brute_force_table(model, hypothesis, evidence)
            expected = np.unravel_index(np.argmax(table), table.shape)
            self.assertEqual(tuple(int(s) for s in expected),
                             ve.map_assignment(model.given(evidence),
                                               hypothesis))

    def test_mpe(self):
        rng = np.random.default_rng(7)
        factors = [mrf.Factor([0, 1], rng.uniform(0.1, 1.0, (2, 3))),
                   mrf.Factor([1, 2], rng.uniform(0.1, 1.0, (3, 2))),
                   mrf.Factor([2, 3, 4], rng.uniform(0.1, 1.0, (2, 2, 2))),
                   mrf.Factor([0, 4], rng.uniform(0.1, 1.0, (2, 2))),
                   mrf.Factor([5], rng.uniform(0.1, 1.0, 3))]
        model = mrf.Network(factors)
        joint = joint_table(model)

        for evidence in [{}, {1: 2}, {0: 1, 4: 0}]:
            ranges = [range(n) if var not in evidence else [evidence[var]]
                      for var, n in zip(model.names, model.nstates)]
            best = max(its.product(*ranges), key=lambda perm: joint[perm])
            expected = dict(zip(model.names, best))
            self.assertEqual(expected, ve.mpe(model.given(evidence)))

    def test_elimination_order(self):
        model = simple_model()
        order = ve.elimination_order(model, exclude=[1])
        self.assertEqual(sorted(order), [0, 2, 3, 4])
        self.assertEqual(order, ve.elimination_order(model, exclude=[1]))


if __name__ == '__main__':
    unittest.main()
