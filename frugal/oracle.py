'''
oracle - The inference interface the search and estimation algorithms use.

Any object with the methods of EliminationOracle can stand in for it:

    clamp(network, name, state) -> network
    marginal(network, names) -> mrf.Factor
    mpe(network) -> dict of every variable's state
    map(network, hypothesis) -> tuple of hypothesis states
'''
from frugal import ve


class EliminationOracle(object):
    ''' Exact inference by variable elimination with min-fill ordering. '''

    def clamp(self, network, name, state):
        return network.clamp(name, state)

    def marginal(self, network, names):
        return ve.marginal(network, names)

    def mpe(self, network):
        return ve.mpe(network)

    def map(self, network, hypothesis):
        return ve.map_assignment(network, hypothesis)


def default_oracle(oracle=None):
    return EliminationOracle() if oracle is None else oracle


def prior_map(network, hypothesis, oracle=None):
    ''' Joint state of the hypothesis variables with maximum prior probability. '''
    return default_oracle(oracle).map(network.unclamped(), hypothesis)


def local_prior_map(network, hypothesis, oracle=None):
    '''
    Per hypothesis variable, the state with maximum prior marginal
    probability. The states are chosen independently, so together they are not
    a joint optimum.

    Parameters
    ----------
    network : mrf.Network
        Model; its evidence overlay is ignored.
    hypothesis : list of int
        Hypothesis variables.
    oracle : oracle
        Inference oracle, EliminationOracle by default.
    Returns
    -------
    states : list of int
        Prior marginal mode of each hypothesis variable.
    scores : list of float
        Prior marginal probability of each chosen state.
    '''
    oracle = default_oracle(oracle)
    prior = network.unclamped()
    states, scores = [], []
    for var in hypothesis:
        belief = oracle.marginal(prior, [var])
        # First state wins ties, as with a strict running maximum.
        best, state = 0.0, 0
        for s in range(belief.nstates[0]):
            if belief(s) > best:
                best, state = float(belief(s)), s
        states.append(state)
        scores.append(best)
    return states, scores


def intermediate_vars(network, hypothesis, evidence):
    ''' Variables of network that are neither hypothesis nor evidence. '''
    excluded = set(hypothesis) | set(evidence)
    return [name for name in network.names if name not in excluded]
