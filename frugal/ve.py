'''
ve - Exact inference by variable elimination.

Sum-product elimination answers marginal queries and max-product elimination
with a traceback answers most probable explanation (MPE) queries. Both honor
the evidence overlay of the network they are given.
'''
import itertools as its

import networkx as nx
import numpy as np

from frugal import mrf


def _align(factor, names, nstates):
    '''
    View the table of factor over the axes of names, inserting unit axes for
    variables outside its scope so that tables broadcast against each other.
    '''
    axes = [factor.names.index(var) for var in names if var in factor]
    table = np.transpose(factor.table, axes)
    return table.reshape([nstates[var] if var in factor else 1
                          for var in names])


def _product(factors, names, nstates):
    ''' Multiply factors into a single table over names. '''
    table = np.ones([nstates[var] for var in names])
    for f in factors:
        table = table * _align(f, names, nstates)
    return table


def _combine_factors(network):
    ''' Combine factors over identical variables. '''

    nstates = dict(zip(network.names, network.nstates))

    vars_to_fac_idx = {}
    combined_factors = []
    for f in network.factors:
        key = tuple(sorted(f.names))
        if key in vars_to_fac_idx:
            idx = vars_to_fac_idx[key]
            f_combined = combined_factors[idx]
            # Align the axes to the combined view before combining.
            combined_factors[idx] = mrf.Factor.fromTable(
                f_combined.names,
                np.multiply(f_combined.table,
                            _align(f, f_combined.names, nstates)))
        else:
            vars_to_fac_idx[key] = len(combined_factors)
            combined_factors.append(mrf.Factor.fromTable(f.names,
                                                         np.copy(f.table)))

    return mrf.Network(combined_factors,
                       alpha=network.alpha,
                       names_order=network.names)


def condition(network, evidence):
    '''
    Fix the evidence variables in every factor and drop them from the network.
    Factors entirely within the evidence only scale the distribution and are
    dropped as well.
    '''
    evidence_vars = set(evidence)
    if not evidence_vars.issubset(set(network.names)):
        raise ValueError("Evidence is not a subset of the network")

    n_given_e = [f.given_evidence(evidence)
                 for f in network.factors
                 if not set(f.names).issubset(evidence_vars)]
    names_order = [name for name in network.names if name not in evidence_vars]
    return mrf.Network(n_given_e,
                       alpha=network.alpha,
                       names_order=names_order)


def condition_eliminate(network, scope, evidence, order):
    '''
    Compute a network that answers conditional queries P(scope | evidence).

    Parameters
    ----------
    network : mrf.Network
        Network to condition and eliminate.
    scope : list of int
        List of variables to query after conditioning on evidence.
    evidence : dict
        Set of variables with fixed state used for conditioning.
    order : list of int
        List of variable names in elimination order.
    Returns
    -------
    network_cond_ve : mrf.Network
        Network resulting from conditioning and elimination. Its factors are
        not normalized.
    '''

    scope = set(scope)
    evidence_vars = set(evidence)

    # Check that evidence and scope are subsets of the network.
    if not scope.issubset(set(network.names)):
        raise ValueError("Observed is not a subset of the network")
    if not evidence_vars.issubset(set(network.names)):
        raise ValueError("Evidence is not a subset of the network")
    # Check that evidence and scope variables are disjoint.
    if not scope.isdisjoint(evidence_vars):
        raise ValueError(("Observed and evidence must be disjoint; found " +
                          "{} in intersection").format(
                              scope.intersection(evidence_vars)))

    elim = set(network.names) - scope - evidence_vars
    elim_ordered = [v for v in order if v in elim]
    if len(elim) != len(elim_ordered):
        raise ValueError(
            "Elimination order missing eliminated variables {}".format(
                list(elim - set(order))))

    n_cond = condition(network, evidence)

    # Perform variable elimination on the set of non-evidence and non-scope
    # variables.
    if len(elim_ordered) > 0:
        return eliminate(n_cond, elim_ordered)
    else:
        return _combine_factors(n_cond)


def eliminate(network, elim):
    '''
    Sum out the variables of elim from network in the given order.

    Parameters
    ----------
    network : mrf.Network
        Network to eliminate.
    elim : list of int
        List of variable names to eliminate in elimination order.
    Returns
    -------
    network_ve : mrf.Network
        Network resulting from elimination.
    '''

    if len(elim) == 0:
        return network

    nstates_per_var = dict(zip(network.names, network.nstates))
    network_ve = list(network.factors)

    # Mass of the components that are eliminated entirely.
    scale = 1.
    for v in elim:

        # Locate all factors f containing v in Scope(f).
        f_contains_v = [f for f in network_ve if v in f]
        # Remove factors with eliminated variable in scope.
        network_ve = [f for f in network_ve if v not in f]

        # Get full set of variables to accumulate new table into.
        psi_vars_set = set(
            its.chain.from_iterable(f.names for f in f_contains_v)) - {v}
        psi_vars = [var for var in network.names if var in psi_vars_set]

        # Multiply out the factors with v on the last axis, then sum it out.
        table = np.sum(
            _product(f_contains_v, psi_vars + [v], nstates_per_var), axis=-1)

        # When the factor is empty, use it as a constant.
        if len(psi_vars) == 0:
            scale *= float(table)
            continue

        # Add new factor.
        network_ve.append(mrf.Factor.fromTable(psi_vars, table))

    # Finally, return a Network of the remaining factors.
    elim = set(elim)
    names_order = [name for name in network.names if name not in elim]
    network_ve = mrf.Network(network_ve,
                             alpha=network.alpha / scale if scale else None,
                             names_order=names_order)
    return _combine_factors(network_ve)


def greedy_ordering(mrf, score_func, with_rand=True):
    '''
    Remove node with the lowest score adding fill edges.

    Parameters
    ----------
    mrf : graph
        Undirected graph representing network to order for variable
        elimination.
    score_func : function
        A function (network.Graph, node) -> int that ranks nodes for variable
        elimination ordering.
    with_rand : bool
        Flag to enable or disable random perturbation for nodes taking equal
        scores.
    Returns
    -------
    order : list
        Removal order of nodes by name using score function heuristic.
    g : network.Graph
        Induced graph resulting from removal order.
    '''

    # Initialize list to remove and sort repeatedly to find min score.
    to_remove = list(mrf.nodes())
    to_remove_set = set(mrf.nodes())
    # Copy graph for adding edges during ordering.
    g = nx.Graph(mrf)
    induced = nx.Graph(mrf)

    # Create score function closed over the graph.
    # Add within interval [0,1) to randomize equal scores.
    def score(n):
        return score_func(g, n)

    if with_rand:
        def score_tie(n):
            return score_func(g, n) + np.random.uniform()
    else:
        score_tie = score

    order = []
    for i in range(mrf.number_of_nodes()):
        # Sort the removal list based on score function.
        to_remove.sort(key=score_tie, reverse=True)
        # Remove the element with the minimum score.
        removed = to_remove.pop()
        min_score = score(removed)
        to_remove_set.remove(removed)
        order.append((removed, min_score))
        # Add fill edges for the removed element.
        clique_nodes = [removed] \
            + [n for n in g.neighbors(removed) if n in to_remove_set]
        g.add_edges_from(its.combinations(clique_nodes, 2))
        induced.add_edges_from(its.combinations(clique_nodes, 2))
        g.remove_node(removed)

    return order, induced


def min_fill(g, n):
    ''' Compute fill edges for a node belonging to the given graph. '''

    # Get a subgraph induced on [n] + [Nh(n)] and count edges.
    clique_nodes = [n] + list(g.neighbors(n))
    current_edges = g.subgraph(clique_nodes).number_of_edges()
    max_edges = (len(clique_nodes) * (len(clique_nodes) - 1)) // 2
    return max_edges - current_edges


def elimination_order(network, exclude=()):
    '''
    Deterministic min-fill elimination order over the variables of network
    that are not in exclude.
    '''
    g = mrf.network_to_mrf(network)
    g.remove_nodes_from(exclude)
    order, _ = greedy_ordering(g, min_fill, with_rand=False)
    return [name for name, _ in order]


def marginal(network, names):
    '''
    Marginal distribution over names given the evidence of network.

    Parameters
    ----------
    network : mrf.Network
        Network with an optional evidence overlay.
    names : list of int
        Variables to keep, none of them clamped.
    Returns
    -------
    belief : mrf.Factor
        Factor over names in the given order. It is normalized unless the
        evidence has zero probability, in which case its mass is zero.
    '''
    names = list(names)
    evidence = network.evidence
    order = elimination_order(network, exclude=set(evidence) | set(names))
    cond = condition_eliminate(network, names, evidence, order)
    nstates = dict(zip(cond.names, cond.nstates))
    table = _product(cond.factors, names, nstates)
    total = np.sum(table)
    if total > 0:
        table = table / total
    return mrf.Factor.fromTable(names, table)


def argmax_assignment(belief):
    '''
    Joint state of the belief variables with the largest value. Ties go to
    the first state in row-major order; a zero belief gives all zeros.
    '''
    entry = np.unravel_index(np.argmax(belief.table), belief.table.shape)
    return tuple(int(s) for s in entry)


def map_assignment(network, hypothesis):
    '''
    Exact MAP: the joint state of the hypothesis variables with maximum
    posterior probability, marginalizing over every other free variable.
    '''
    return argmax_assignment(marginal(network, hypothesis))


def mpe(network):
    '''
    Most probable explanation given the evidence of network.

    Max-product elimination in min-fill order, followed by a traceback that
    fixes each eliminated variable to its best state given the variables
    eliminated after it.

    Parameters
    ----------
    network : mrf.Network
        Network with an optional evidence overlay.
    Returns
    -------
    assignment : dict
        Map of every network variable to its state; evidence variables keep
        their clamped state.
    '''
    evidence = network.evidence
    cond = condition(network, evidence)
    nstates = dict(zip(cond.names, cond.nstates))
    order = elimination_order(cond)

    factors = list(cond.factors)
    traceback = []
    for v in order:
        f_contains_v = [f for f in factors if v in f]
        factors = [f for f in factors if v not in f]
        psi_vars_set = set(
            its.chain.from_iterable(f.names for f in f_contains_v)) - {v}
        psi_vars = [var for var in cond.names if var in psi_vars_set]
        table = _product(f_contains_v, psi_vars + [v], nstates)
        traceback.append((v, psi_vars, table))
        factors.append(mrf.Factor.fromTable(psi_vars, np.max(table, axis=-1)))

    assignment = dict(evidence)
    for v, psi_vars, table in reversed(traceback):
        best = table[tuple(assignment[var] for var in psi_vars)]
        assignment[v] = int(np.argmax(best))
    return assignment
