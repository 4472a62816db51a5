'''
run - Dispatch one computation over a network from an immutable Config.
'''
import collections
import logging

import numpy as np

from frugal import annealing, independence, mfe, relevance
from frugal.oracle import default_oracle, intermediate_vars

logger = logging.getLogger(__name__)

ALGORITHMS = ('map', 'annealed', 'mfe', 'relevance', 'weak', 'strong')

Config = collections.namedtuple('Config', [
    'algorithm',
    'hypothesis',
    'evidence',
    'relevant',
    'irrelevant',
    'test_vars',
    'quantified',
    'max_indep',
    'assess_relevance',
    'relevance_samples',
    'relevance_threshold',
    'samples',
    'cutoff_time',
    'stop_rule',
    'seed',
])
Config.__new__.__defaults__ = (
    (),             # evidence
    (),             # relevant
    (),             # irrelevant
    (),             # test_vars
    False,          # quantified
    False,          # max_indep
    False,          # assess_relevance
    10,             # relevance_samples
    0.1,            # relevance_threshold
    100,            # samples
    3600,           # cutoff_time
    'no_increase',  # stop_rule
    None,           # seed
)


def _annealing_params(stop_rule):
    if stop_rule == 'no_increase':
        return {}
    if stop_rule == 'iterations':
        return {'stop_steps': None, 'max_sweeps': annealing.MAX_SWEEPS}
    raise ValueError("Unknown stop rule {}".format(stop_rule))


def run(network, config, oracle=None):
    '''
    Run the computation config asks for.

    Parameters
    ----------
    network : mrf.Network
        Model. Its evidence overlay is replaced by config.evidence.
    config : Config
        What to compute and with which parameters.
    oracle : oracle
        Inference oracle, EliminationOracle by default.
    Returns
    -------
    result :
        map, annealed, mfe: tuple of hypothesis states.
        relevance: dict of relevance per intermediate variable.
        weak, strong: bool (independent), float (quantified) or tuple of
        variables (max_indep).
    '''
    if config.algorithm not in ALGORITHMS:
        raise ValueError("Unknown algorithm {}; expecting one of {}".format(
            config.algorithm, ALGORITHMS))
    if config.quantified and config.max_indep:
        raise ValueError("Quantified and maximum independent set results "
                         "cannot be combined")

    oracle = default_oracle(oracle)
    rng = np.random.default_rng(config.seed)
    hypothesis = list(config.hypothesis)
    evidence = dict(config.evidence)
    network = network.unclamped()
    logger.debug("Running %s with %s", config.algorithm, config)

    if config.algorithm == 'map':
        return tuple(oracle.map(network.given(evidence), hypothesis))

    if config.algorithm == 'annealed':
        return annealing.annealed_map(
            network, hypothesis, evidence, cutoff_time=config.cutoff_time,
            rng=rng, oracle=oracle, **_annealing_params(config.stop_rule))

    if config.algorithm == 'mfe':
        return mfe.most_frugal_explanation(
            network, evidence, hypothesis, relevant=config.relevant,
            irrelevant=config.irrelevant,
            assess_relevance=config.assess_relevance,
            relevance_samples=config.relevance_samples,
            relevance_threshold=config.relevance_threshold,
            samples=config.samples, cutoff_time=config.cutoff_time, rng=rng,
            oracle=oracle)

    if config.algorithm == 'relevance':
        intermediate = intermediate_vars(network, hypothesis, evidence)
        return dict(
            (var, relevance.relevance(
                network, var, evidence, hypothesis, intermediate,
                samples=config.relevance_samples, rng=rng, oracle=oracle))
            for var in intermediate)

    # Independence tests are relative to the exact MAP.
    reference = tuple(oracle.map(network.given(evidence), hypothesis))
    args = (network, evidence, hypothesis, reference, list(config.test_vars))
    if config.algorithm == 'weak':
        if config.quantified:
            return independence.weak_map_indep_measure(*args, oracle=oracle)
        if config.max_indep:
            return independence.max_weak_map_indep(*args, oracle=oracle)
        return independence.is_weak_map_independent(*args, oracle=oracle)
    else:
        if config.quantified:
            return independence.strong_map_indep_measure(*args, oracle=oracle)
        if config.max_indep:
            return independence.max_strong_map_indep(
                *args, cutoff_time=config.cutoff_time, oracle=oracle)
        return independence.is_strong_map_independent(*args, oracle=oracle)
