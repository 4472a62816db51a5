'''
annealing - Annealed MAP search.

Stochastic local search over the hypothesis variables after Yuan, Lu and
Druzdzel (2004). Each sweep samples every hypothesis variable from its
marginal given the evidence and the variables already visited in the sweep,
and keeps the new state according to the temperature. The temperature
cools geometrically and is reheated toward the temperature where the specific
heat of the score trace peaked.
'''
import logging
import time

import numpy as np

from frugal.oracle import default_oracle, local_prior_map

logger = logging.getLogger(__name__)

T_INIT = 0.99
COOLING_RATE = 0.8
REHEAT_K = 0.1
REHEAT_STEPS = 10
STOP_STEPS = 20
SPEC_HEAT_K = 1.0
MAX_SWEEPS = 1000


def specific_heat(scores, temperature, best_score, kprob=SPEC_HEAT_K):
    '''
    Specific heat of a score trace at the given temperature.

    Each score s is weighted by exp(-(best - s) / (kprob * T)); the result is
    the weighted variance of the deficit best - s divided by T^2.

    Parameters
    ----------
    scores : list of float
        Every score recorded so far.
    temperature : float
        Current temperature, > 0.
    best_score : float
        Best score recorded so far.
    kprob : float
        Boltzmann-like constant of the weights.
    Returns
    -------
    heat : float
        Non-negative specific heat.
    '''
    deficit = best_score - np.asarray(scores, dtype=float)
    weights = np.exp(-deficit / (kprob * temperature))
    probs = weights / np.sum(weights)
    mean = np.sum(deficit * probs)
    var = np.sum(deficit * deficit * probs) - mean * mean
    if var < 0:
        var = 0.
    return float(var / (temperature * temperature))


def accept(d, u, temperature):
    '''
    Acceptance law of the search for a candidate whose probability ratio to
    the current state is d. Improvements are always kept, d == 1 is no move,
    and a worse candidate is kept iff u < d^(1/T - 1).
    '''
    if d > 1:
        return True
    if d < 1:
        return u < d ** (1. / temperature - 1.)
    return False


def sample_state(belief, u):
    '''
    State of a single-variable belief drawn proportionally to its values,
    using u ~ U[0, 1). States with zero mass are never drawn.
    '''
    cumulative = np.cumsum(belief.table)
    entry = int(np.searchsorted(cumulative, u * cumulative[-1], side='right'))
    return min(entry, len(cumulative) - 1)


class AnnealedMapSearch(object):
    '''
    Annealed MAP search over a network.

    The search keeps the current assignment with its per-variable scores, the
    best assignment found, the score trace and the temperature state. run()
    sweeps until a stopping rule fires and returns the best assignment.

    best_trace and no_change_sweeps, the count of consecutive sweeps without
    any accepted move, are kept for inspection; no rule reads them.
    '''

    def __init__(self, network, hypothesis, evidence, cutoff_time=None,
                 rng=None, oracle=None, t_init=T_INIT,
                 cooling_rate=COOLING_RATE, reheat_k=REHEAT_K,
                 reheat_steps=REHEAT_STEPS, stop_steps=STOP_STEPS,
                 max_sweeps=None, kprob=SPEC_HEAT_K):
        if stop_steps is None and max_sweeps is None and cutoff_time is None:
            raise ValueError("Annealed MAP needs at least one stopping rule")
        if not 0 < t_init < 1:
            raise ValueError("Initial temperature must be in (0, 1)")
        self.network = network
        self.hypothesis = list(hypothesis)
        self.evidence = dict(evidence)
        self.cutoff_time = cutoff_time
        self.rng = np.random.default_rng() if rng is None else rng
        self.oracle = default_oracle(oracle)
        self.t_init = t_init
        self.cooling_rate = cooling_rate
        self.reheat_k = reheat_k
        self.reheat_steps = reheat_steps
        self.stop_steps = stop_steps
        self.max_sweeps = max_sweeps
        self.kprob = kprob

        # INIT
        self.assignment, self.assignment_scores = local_prior_map(
            network, self.hypothesis, self.oracle)
        self.score = float(np.prod(self.assignment_scores))
        self.best_score = self.score
        self.best_assignment = tuple(self.assignment)
        self.scores = [self.score]
        self.best_trace = []

        self.temperature = t_init
        self.spec_heat = 0.
        self.spec_temperature = t_init
        self.no_change_sweeps = 0
        self.no_increase_sweeps = 0
        self.no_increase_stop = 0
        self.sweeps = 0

        network_e = network.unclamped()
        for var, state in self.evidence.items():
            network_e = self.oracle.clamp(network_e, var, state)
        self.network_e = network_e

        logger.debug("Local prior MAP %s with score %s",
                     self.assignment, self.score)

    def sweep(self):
        '''
        Resample every hypothesis variable once. Returns (changed, increased)
        for the sweep.
        '''
        changed, increased = False, False
        working = self.network_e
        for idx, var in enumerate(self.hypothesis):
            u = self.rng.uniform()
            belief = self.oracle.marginal(working, [var])
            candidate = sample_state(belief, self.rng.uniform())

            p_new = float(belief(candidate))
            p_current = float(belief(self.assignment[idx]))
            if p_current > 0:
                d = p_new / p_current
            else:
                d = np.inf if p_new > 0 else 1.

            if accept(d, u, self.temperature):
                logger.debug("Updating %s from %s to %s (d=%s)",
                             var, self.assignment[idx], candidate, d)
                self.score = (self.score / self.assignment_scores[idx]
                              * p_new)
                self.assignment[idx] = candidate
                self.assignment_scores[idx] = p_new
                changed = True
                if d > 1:
                    increased = True

            working = self.oracle.clamp(working, var, self.assignment[idx])
        return changed, increased

    def record(self):
        ''' Track the score trace, best assignment and specific heat peak. '''
        self.scores.append(self.score)
        if self.score > self.best_score:
            self.best_score = self.score
            self.best_assignment = tuple(self.assignment)
        self.best_trace.append(self.best_score)

        heat = specific_heat(self.scores, self.temperature, self.best_score,
                             self.kprob)
        if heat > self.spec_heat:
            self.spec_heat = heat
            self.spec_temperature = self.temperature

    def cool(self):
        self.temperature *= self.cooling_rate

        # Reheat toward the specific heat peak.
        if self.no_increase_sweeps >= self.reheat_steps:
            self.temperature = (self.reheat_k * (1 - self.best_score)
                                + self.spec_temperature)
            if self.temperature >= 1.:
                self.temperature = self.t_init
            logger.debug("Reheating to %s", self.temperature)
            self.no_increase_sweeps = 0

    def out_of_time(self, start):
        return (self.cutoff_time is not None
                and time.monotonic() - start >= self.cutoff_time)

    def should_stop(self, start):
        if (self.stop_steps is not None
                and self.no_increase_stop > self.stop_steps):
            return True
        if self.max_sweeps is not None and self.sweeps >= self.max_sweeps:
            return True
        if self.out_of_time(start):
            logger.info("Stopping annealed MAP after %d sweeps - time bound",
                        self.sweeps)
            return True
        return False

    def run(self):
        start = time.monotonic()
        if self.out_of_time(start):
            logger.info("Stopping annealed MAP before sweeping - time bound")
            return self.best_assignment

        while True:
            changed, increased = self.sweep()
            self.sweeps += 1

            if changed:
                self.no_change_sweeps = 0
            else:
                self.no_change_sweeps += 1
            if increased:
                self.no_increase_sweeps = 0
                self.no_increase_stop = 0
            else:
                self.no_increase_sweeps += 1
                self.no_increase_stop += 1

            self.record()
            logger.debug("Sweep %d: current %s score %s best %s",
                         self.sweeps, self.assignment, self.score,
                         self.best_score)
            self.cool()
            if self.should_stop(start):
                break

        logger.info("Annealed MAP %s with score %s", self.best_assignment,
                    self.best_score)
        return self.best_assignment


def annealed_map(network, hypothesis, evidence, cutoff_time=None, rng=None,
                 oracle=None, **params):
    '''
    Approximate the MAP of the hypothesis variables given evidence with
    Annealed MAP.

    Parameters
    ----------
    network : mrf.Network
        Model.
    hypothesis : list of int
        Hypothesis variables, resampled in this order.
    evidence : dict
        Observed states of the evidence variables.
    cutoff_time : float
        Wall-clock bound in seconds, or None.
    rng : numpy.random.Generator
        Source of randomness.
    oracle : oracle
        Inference oracle, EliminationOracle by default.
    params :
        Schedule parameters of AnnealedMapSearch.
    Returns
    -------
    assignment : tuple of int
        Best assignment found.
    '''
    return AnnealedMapSearch(network, hypothesis, evidence,
                             cutoff_time=cutoff_time, rng=rng, oracle=oracle,
                             **params).run()
