'''
mrf - Factor networks with an evidence overlay.
'''
import itertools as its

import networkx as nx
import numpy as np


def _query_table(names, nstates, q, table):
    '''
    Query the potential function defined by the N-dimensional matrix
    table over a full query assignment.

    Parameters
    ----------
    names : list of int
        List of variable names.
    nstates : list of int
        List of state counts for each variable.
    q : query
        Variable states for all variables in the joint distribution. If the
        query is not a dict, then its iteration order is assumed to match
        the canonical ordering of Factor.names.
    table : array
        Array of potential responses for joint assignments of the variables.
    Returns
    -------
    p : number
        Potential phi(X1=x1,...,XN=xn).
    '''

    # Execute query based on type.
    if isinstance(q, dict):
        # Query map contains all variables in range.
        for v, s in zip(names, nstates):
            if v not in q:
                raise ValueError(("Missing variable {}; the query map " +
                                  "must contain all names").format(v))
            if not 0 <= q[v] < s:
                raise ValueError(("Assignment {}={} is out of range for " +
                                  "nstates={}; variables must be in range " +
                                  "of nstates").format(v, q[v], s))

        # Query is valid.
        return table[tuple([q[v] for v in names])]
    else:
        # Query list contains all variables in range.
        if len(q) != table.ndim:
            raise ValueError(("len(q)={}, N={}; query " +
                              "must have len(q)=N)").format(len(q), table.ndim))

        for qs, v, s in zip(q, names, nstates):
            if not 0 <= qs < s:
                raise ValueError(("Assignment {}={} is out of range for " +
                                  "nstates={}; variables must be in range " +
                                  "of nstates").format(v, qs, s))

        # Query is valid.
        return table[tuple(q)]


class Factor(object):
    '''
    Potential over a clique of nodes in a PGM represented as a full
    N-dimensional table. Beliefs returned by inference are factors too.
    '''

    @staticmethod
    def fromTable(names, table):
        return Factor(names, table=table)

    def __init__(self, names, table):
        '''
        Initialize the factor from its variables and table.

        N.B. The table data are not copied defensively.
        '''

        self._names = list(names)
        self._names_set = set(names)
        self._table = np.asarray(table)

        if len(self._names) != self._table.ndim:
            raise ValueError("len(names)={} must match ndim={}".format(
                len(self._names), self._table.ndim))

    def __call__(self, *args):
        return self.query(*args)

    def __contains__(self, name):
        return name in self._names_set

    @property
    def names(self):
        return self._names

    @property
    def nstates(self):
        return self._table.shape

    @property
    def table(self):
        return self._table

    def total(self):
        ''' Total mass of the factor. '''
        return float(np.sum(self._table))

    def given_evidence(self, evidence):
        '''
        Assign variables in evidence to fixed values and return a new factor
        that is the current factor given the evidence.

        Parameters
        ----------
        evidence : dict
            Map of assigned variables. The evidence does not have to be
            comprehensive in the scope of this factor.
        Returns
        -------
        factor : Factor
            New factor with variables in this scope fixed as per evidence.
        '''

        slicer = tuple(evidence[v] if v in evidence else slice(None)
                       for v in self.names)
        names = [v for v in self.names if v not in evidence]
        if len(names) > 0:
            return Factor.fromTable(names, self.table[slicer])
        else:
            raise ValueError("Cannot condition on every variable; use query().")

    def query(self, *args):
        '''
        Query the factor with the given variable states.

        Note that the query can be individual variable states as in
            factor(0, 1, ...)
        or a single tuple of states as in
            factor((0, 1, ...))
        of a dictionary of states as in
            factor({0: 0, ...}).
        '''
        if len(args) == 0:
            raise ValueError("Factor query cannot be empty.")
        elif len(args) == 1:
            q = args[0]
            # When the query is a single value, wrap it in an iterable type.
            try:
                iter(q)
            except TypeError:
                q = (q,)
        else:
            q = args
        return _query_table(self.names, self.nstates, q, self.table)


class Network(object):
    '''
    A group of factors and a partitioning constant alpha defines a network;
    the joint distribution is the product of the factors divided by alpha.

    The network also carries an evidence overlay: a map of clamped variables
    that inference applies before answering queries. Clamping never touches
    the factors; it returns a new network that shares them, so search
    branches can hold their own conditioned views of one model.
    '''

    def __init__(self, factors, alpha=None, names_order=None, evidence=None):

        # Initialize name order.
        all_names = set(its.chain(*[f.names for f in factors]))
        if names_order is None:
            names_order = sorted(all_names)
        if set(names_order) != all_names:
            raise ValueError("names_order must match the factor variables")

        # Get variable states per name.
        name_to_idx = dict((name, idx)
                           for idx, name in enumerate(names_order))
        nstates_ordered = [None] * len(names_order)
        for f in factors:
            for name, nstates in zip(f.names, f.nstates):
                idx = name_to_idx[name]
                if nstates_ordered[idx] is not None:
                    if nstates_ordered[idx] != nstates:
                        raise ValueError(
                            "Variable {} has inconsistent nstates".format(
                                name))
                else:
                    nstates_ordered[idx] = nstates

        self._names = list(names_order)
        self._nstates = nstates_ordered
        self._nstates_by_name = dict(zip(self._names, nstates_ordered))
        self._alpha = alpha if alpha else 1.0
        self._factors = factors
        self._evidence = dict(evidence) if evidence else {}
        for name, state in self._evidence.items():
            self._check_state(name, state)

    @property
    def names(self):
        return self._names

    @property
    def nstates(self):
        return self._nstates

    @property
    def factors(self):
        return self._factors

    @property
    def alpha(self):
        return self._alpha

    @property
    def evidence(self):
        return dict(self._evidence)

    def cardinality(self, name):
        if name not in self._nstates_by_name:
            raise ValueError("Unknown variable {}".format(name))
        return self._nstates_by_name[name]

    def _check_state(self, name, state):
        nstates = self.cardinality(name)
        if not 0 <= state < nstates:
            raise ValueError(
                "State {} of variable {} is out of range for nstates={}".format(
                    state, name, nstates))

    def _derive(self, evidence):
        return Network(self.factors, alpha=self.alpha, names_order=self.names,
                       evidence=evidence)

    def clamp(self, name, state):
        '''
        Return a new network with variable name clamped to state. The factors
        are shared with this network; only the evidence overlay differs.
        '''
        self._check_state(name, state)
        evidence = dict(self._evidence)
        evidence[name] = int(state)
        return self._derive(evidence)

    def given(self, evidence):
        ''' Clamp every variable in the evidence map. '''
        for name, state in evidence.items():
            self._check_state(name, state)
        merged = dict(self._evidence)
        merged.update((name, int(state)) for name, state in evidence.items())
        return self._derive(merged)

    def unclamped(self):
        ''' The same network without any evidence. '''
        return self._derive({})


def network_to_mrf(network):
    ''' Convert an mrf Network to a networkx Graph over its variables. '''

    g = nx.Graph()
    g.add_nodes_from(network.names)
    g.add_edges_from(edge for f in network.factors
                     for edge in its.combinations(f.names, 2))
    return g
