'''
mfe - Most Frugal Explanation (Kwisthout, 2015).

Instead of marginalizing over every intermediate variable, the irrelevant
ones are fixed to uniformly sampled states and the conditional MAP of the
hypothesis variables is computed per sample. The explanation found most
often wins.
'''
import collections
import logging
import time

import numpy as np

from frugal import walker
from frugal.oracle import default_oracle, intermediate_vars
from frugal.relevance import partition_relevance

logger = logging.getLogger(__name__)


def vote(counts):
    '''
    Assignment with the highest count. Ties go to the smallest assignment in
    tuple order.
    '''
    if not counts:
        raise ValueError("Cannot vote without any counted assignment")
    best, best_count = None, 0
    for assignment in sorted(counts):
        if counts[assignment] > best_count:
            best, best_count = assignment, counts[assignment]
    return best


def most_frugal_explanation(network, evidence, hypothesis, relevant=(),
                            irrelevant=(), assess_relevance=False,
                            relevance_samples=10, relevance_threshold=0.1,
                            samples=100, cutoff_time=None, rng=None,
                            oracle=None):
    '''
    Approximate the MAP of the hypothesis variables by voting over MAPs
    conditioned on sampled states of the irrelevant variables.

    Parameters
    ----------
    network : mrf.Network
        Model.
    evidence : dict
        Observed states of the evidence variables.
    hypothesis : list of int
        Hypothesis variables.
    relevant : list of int
        Intermediate variables that are marginalized over exactly.
    irrelevant : list of int
        Intermediate variables that are sampled.
    assess_relevance : bool
        Re-partition the given intermediate variables (every intermediate
        variable when none are given) by their estimated relevance.
    relevance_samples : int
        Contexts per relevance estimate, 0 for exact enumeration.
    relevance_threshold : float
        Minimum relevance of a relevant variable.
    samples : int
        Number of samples over the irrelevant variables.
    cutoff_time : float
        Wall-clock bound in seconds, or None.
    rng : numpy.random.Generator
        Source of randomness.
    oracle : oracle
        Inference oracle, EliminationOracle by default.
    Returns
    -------
    mfe : tuple of int
        Most frequent conditional MAP.
    '''
    if samples < 1:
        raise ValueError("MFE needs at least one sample")
    oracle = default_oracle(oracle)
    rng = np.random.default_rng() if rng is None else rng
    relevant, irrelevant = list(relevant), list(irrelevant)

    if assess_relevance:
        candidates = relevant + irrelevant
        if not candidates:
            candidates = intermediate_vars(network, hypothesis, evidence)
        partition = partition_relevance(
            network, evidence, hypothesis, candidates, relevance_threshold,
            samples=relevance_samples, rng=rng, oracle=oracle)
        relevant, irrelevant = partition.relevant, partition.irrelevant
    logger.debug("Relevant variables %s, irrelevant variables %s",
                 relevant, irrelevant)

    nstates = [network.cardinality(var) for var in irrelevant]
    sample = [0] * len(irrelevant)
    base = network.unclamped().given(evidence)

    counts = collections.Counter()
    start = time.monotonic()
    for n in range(samples):
        walker.random_sample(sample, nstates, rng)
        network_s = base.given(dict(zip(irrelevant, sample)))
        counts[tuple(oracle.map(network_s, hypothesis))] += 1

        if (cutoff_time is not None
                and time.monotonic() - start >= cutoff_time):
            logger.info("Stopping MFE after %d samples - time bound", n + 1)
            break

    for assignment, count in sorted(counts.items()):
        logger.debug("Assignment %s count was %d", assignment, count)
    mfe = vote(counts)
    logger.info("MFE %s", mfe)
    return mfe
