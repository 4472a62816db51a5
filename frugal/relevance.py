'''
relevance - How much an intermediate variable matters for the explanation.

The relevance of an intermediate variable is the fraction of contexts (joint
states of the other intermediate variables) in which changing its state
changes the MPE of the hypothesis variables.
'''
import collections
import logging

import numpy as np

from frugal import walker
from frugal.oracle import default_oracle

logger = logging.getLogger(__name__)

RelevancePartition = collections.namedtuple(
    'RelevancePartition', ['relevant', 'irrelevant', 'scores'])


def relevance(network, node, evidence, hypothesis, intermediate, samples=0,
              rng=None, oracle=None):
    '''
    Estimate the relevance of node.

    Parameters
    ----------
    network : mrf.Network
        Model.
    node : int
        Intermediate variable to assess.
    evidence : dict
        Observed states of the evidence variables.
    hypothesis : list of int
        Hypothesis variables.
    intermediate : list of int
        Intermediate variables, node included.
    samples : int
        Number of uniformly sampled contexts, or 0 to enumerate every context.
    rng : numpy.random.Generator
        Source of randomness for sampled contexts.
    oracle : oracle
        Inference oracle, EliminationOracle by default.
    Returns
    -------
    relevance : float
        Fraction of contexts in which some state of node gives a hypothesis
        MPE different from the one with node in state 0.
    '''
    intermediate = list(intermediate)
    if node not in intermediate:
        raise ValueError(
            "Node {} not found in the intermediate variables".format(node))
    if samples < 0:
        raise ValueError("samples must be >= 0")
    oracle = default_oracle(oracle)
    rng = np.random.default_rng() if rng is None else rng

    node_index = intermediate.index(node)
    nstates = [network.cardinality(var) for var in intermediate]
    base = network.unclamped().given(evidence)

    if samples == 0:
        contexts = walker.joint_states(nstates, skip=node_index)
        num_contexts = walker.num_joint_states(nstates, skip=node_index)
    else:
        def sampled_contexts():
            states = [0] * len(intermediate)
            for _ in range(samples):
                yield tuple(walker.random_sample(states, nstates, rng,
                                                 skip=node_index))
        contexts = sampled_contexts()
        num_contexts = samples

    non_equals = 0
    for context in contexts:
        network_c = base.given(dict(
            (var, state) for var, state in zip(intermediate, context)
            if var != node))

        mpe_cmp = oracle.mpe(oracle.clamp(network_c, node, 0))
        baseline = tuple(mpe_cmp[var] for var in hypothesis)
        changed = False
        for state in range(1, nstates[node_index]):
            mpe = oracle.mpe(oracle.clamp(network_c, node, state))
            if tuple(mpe[var] for var in hypothesis) != baseline:
                changed = True
                break

        logger.debug("Context %s of %s: MPE %s",
                     context, node, "changed" if changed else "unchanged")
        if changed:
            non_equals += 1

    return float(non_equals) / num_contexts


def partition_relevance(network, evidence, hypothesis, intermediate,
                        threshold, samples=0, rng=None, oracle=None):
    '''
    Split intermediate variables into relevant ones (relevance >= threshold)
    and irrelevant ones, keeping their order.
    '''
    rng = np.random.default_rng() if rng is None else rng
    relevant, irrelevant, scores = [], [], {}
    for var in intermediate:
        rel = relevance(network, var, evidence, hypothesis, intermediate,
                        samples=samples, rng=rng, oracle=oracle)
        logger.debug("Relevance of %s is %s", var, rel)
        scores[var] = rel
        if rel >= threshold:
            relevant.append(var)
        else:
            irrelevant.append(var)
    return RelevancePartition(relevant, irrelevant, scores)
