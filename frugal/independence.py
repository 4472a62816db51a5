'''
independence - MAP-independence tests (Kwisthout, 2021).

A MAP explanation h* is independent of a set of test variables R when no
assignment to R changes the MAP. The weak tests clamp one variable of R at a
time; the strong tests clamp all of R jointly. The quantified measures give
the fraction of tested contexts in which the MAP changed.
'''
import itertools as its
import logging
import time

from frugal import walker
from frugal.oracle import default_oracle

logger = logging.getLogger(__name__)


def _check_test_vars(network, evidence, hypothesis, test_vars,
                     allow_empty=False):
    if not test_vars and not allow_empty:
        raise ValueError("The independence test variables are empty")
    excluded = set(evidence) | set(hypothesis)
    for var in test_vars:
        network.cardinality(var)
        if var in excluded:
            raise ValueError(
                "Test variable {} is an evidence or hypothesis variable".format(
                    var))


def weak_map_indep_measure(network, evidence, hypothesis, hypothesis_values,
                           test_vars, decision=False, oracle=None):
    '''
    Weak MAP-independence of hypothesis_values from test_vars.

    Parameters
    ----------
    network : mrf.Network
        Model.
    evidence : dict
        Observed states of the evidence variables.
    hypothesis : list of int
        Hypothesis variables.
    hypothesis_values : sequence of int
        The reference explanation h*, in the order of hypothesis.
    test_vars : list of int
        Variables R to test one at a time.
    decision : bool
        Return 1.0 as soon as one context changes the MAP.
    oracle : oracle
        Inference oracle, EliminationOracle by default.
    Returns
    -------
    measure : float
        Fraction of (variable, state) pairs whose MAP differs from h*.
    '''
    test_vars = list(test_vars)
    _check_test_vars(network, evidence, hypothesis, test_vars)
    oracle = default_oracle(oracle)
    reference = tuple(hypothesis_values)
    base = network.unclamped().given(evidence)

    count, different = 0, 0
    for var in test_vars:
        for state in range(network.cardinality(var)):
            best = tuple(oracle.map(oracle.clamp(base, var, state),
                                    hypothesis))
            count += 1
            if best == reference:
                logger.debug("Same for R = %s and r = %s", var, state)
            else:
                logger.debug("Different for R = %s and r = %s", var, state)
                different += 1
                if decision:
                    return 1.0

    logger.debug("Quantified weak MAP independence: %s",
                 float(different) / count)
    return float(different) / count


def strong_map_indep_measure(network, evidence, hypothesis, hypothesis_values,
                             test_vars, decision=False, oracle=None):
    '''
    Strong MAP-independence of hypothesis_values from test_vars: the
    fraction of joint states of test_vars whose MAP differs from h*. With
    decision, 1.0 is returned at the first difference.
    '''
    test_vars = list(test_vars)
    _check_test_vars(network, evidence, hypothesis, test_vars)
    return _strong_measure(network, evidence, hypothesis, hypothesis_values,
                           test_vars, decision, default_oracle(oracle))


def _strong_measure(network, evidence, hypothesis, hypothesis_values,
                    test_vars, decision, oracle):
    reference = tuple(hypothesis_values)
    base = network.unclamped().given(evidence)
    nstates = [network.cardinality(var) for var in test_vars]

    count, different = 0, 0
    for states in walker.joint_states(nstates):
        network_r = base
        for var, state in zip(test_vars, states):
            network_r = oracle.clamp(network_r, var, state)
        best = tuple(oracle.map(network_r, hypothesis))
        count += 1
        if best == reference:
            logger.debug("Same for %s = %s", test_vars, states)
        else:
            logger.debug("Different for %s = %s", test_vars, states)
            different += 1
            if decision:
                return 1.0

    logger.debug("Quantified strong MAP independence: %s",
                 float(different) / count)
    return float(different) / count


def is_weak_map_independent(network, evidence, hypothesis, hypothesis_values,
                            test_vars, oracle=None):
    ''' True iff no single test variable state changes the MAP. '''
    return weak_map_indep_measure(network, evidence, hypothesis,
                                  hypothesis_values, test_vars,
                                  decision=True, oracle=oracle) == 0.0


def is_strong_map_independent(network, evidence, hypothesis,
                              hypothesis_values, test_vars, oracle=None):
    ''' True iff no joint state of the test variables changes the MAP. '''
    return strong_map_indep_measure(network, evidence, hypothesis,
                                    hypothesis_values, test_vars,
                                    decision=True, oracle=oracle) == 0.0


def max_weak_map_indep(network, evidence, hypothesis, hypothesis_values,
                       test_vars, oracle=None):
    ''' Test variables that are each weakly MAP-independent, in order. '''
    return tuple(var for var in test_vars
                 if is_weak_map_independent(network, evidence, hypothesis,
                                            hypothesis_values, [var],
                                            oracle=oracle))


def max_strong_map_indep(network, evidence, hypothesis, hypothesis_values,
                         test_vars, cutoff_time=None, oracle=None):
    '''
    Largest subset of test_vars that is strongly MAP-independent.

    Subsets are tried by increasing size and, within a size, in
    itertools.combinations order. The first passing subset of a size becomes
    the answer and the search moves on to the next size; a size without a
    passing subset does not end the search. The empty set is the size-0
    answer.

    Parameters
    ----------
    network : mrf.Network
        Model.
    evidence : dict
        Observed states of the evidence variables.
    hypothesis : list of int
        Hypothesis variables.
    hypothesis_values : sequence of int
        The reference explanation h*.
    test_vars : list of int
        Candidate variables.
    cutoff_time : float
        Wall-clock bound in seconds, checked between subset tests, or None.
    oracle : oracle
        Inference oracle, EliminationOracle by default.
    Returns
    -------
    subset : tuple of int
        Largest strongly independent subset found.
    '''
    test_vars = list(test_vars)
    _check_test_vars(network, evidence, hypothesis, test_vars,
                     allow_empty=True)
    oracle = default_oracle(oracle)

    start = time.monotonic()
    strong = ()
    for k in range(1, len(test_vars) + 1):
        for subset in its.combinations(test_vars, k):
            if (cutoff_time is not None
                    and time.monotonic() - start >= cutoff_time):
                logger.info("Stopping maximum strong independent set "
                            "search - time bound")
                return strong
            if _strong_measure(network, evidence, hypothesis,
                               hypothesis_values, list(subset), True,
                               oracle) == 0.0:
                logger.debug("Strongly independent subset %s", subset)
                strong = subset
                break
    return strong
