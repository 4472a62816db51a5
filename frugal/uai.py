'''
uai - Read and write networks and evidence in the UAI exchange format.
'''
import numpy as np

from frugal import mrf


def load(file):
    '''
    Parse the UAI network data to a mrf.Network of Factor instances.

    Both MARKOV and BAYES networks are read; a BAYES table is the conditional
    distribution of the last variable of its clique given the others, which is
    a factor like any other. Variables are named 0..N-1.

    Parameters
    ----------
    file : iterable of string
        Iterator over lines of the UAI file. Can be file, list, etc.
    Returns
    -------
    network : mrf.Network
        The network stored in the UAI file.
    '''

    tokens = iter(' '.join(line.strip() for line in file).split())

    def next_token():
        try:
            return next(tokens)
        except StopIteration:
            raise ValueError("Unexpected end of UAI data")

    # Read network type.
    net_type = next_token().strip().lower()
    if net_type not in ('markov', 'bayes'):
        raise ValueError(
            "Unsupported UAI network type {}; expecting MARKOV or BAYES".format(
                net_type))

    # Read number of variables.
    num_vars = int(next_token())

    # Read cardinality.
    cardinality = [int(next_token()) for _ in range(num_vars)]

    # Read num cliques.
    num_cliques = int(next_token())

    # Read variables within each clique.
    clique_descs = []
    for _ in range(num_cliques):
        size = int(next_token())
        clique_descs.append(tuple(int(next_token()) for _ in range(size)))

    # Read factor tables.
    factors = []
    for clique_desc in clique_descs:

        # Read num entries and get dims for parameter table.
        num_entries = int(next_token())
        pdims = [cardinality[var] for var in clique_desc]
        if num_entries != int(np.prod(pdims)):
            raise ValueError(
                "Clique {} expects {} entries; found {}".format(
                    clique_desc, int(np.prod(pdims)), num_entries))

        # Read factor parameters into a table.
        data = [float(next_token()) for _ in range(num_entries)]
        table = np.array(data).reshape(pdims)

        # Make a new factor.
        factors.append(mrf.Factor(list(clique_desc), table))

    # Construct a network.
    return mrf.Network(
        factors, names_order=list(range(num_vars)))


def dump(network, file):
    '''
    Write the network in UAI format to the given file.

    Parameters
    ----------
    network : mrf.Network
        The network to serialize.
    file : file
        File for UAI output.
    Returns
    -------
    None
    '''

    # 1. Network type.
    file.write('MARKOV\n')

    # 2. Number of variables.
    file.write('{}\n'.format(len(network.names)))

    # 3. Variable cardinalities.
    file.write('{}\n'.format(' '.join([str(val) for val in network.nstates])))

    # 4. Number of cliques.
    file.write('{}\n'.format(len(network.factors)))

    # 5. [CLIQUE_VARS I1 ... IN]
    name_to_idx = dict((name, idx) for idx, name in enumerate(network.names))
    file.writelines(['{} {}\n'.format(
        len(fac.names), ' '.join([str(name_to_idx[var]) for var in fac.names]))
        for fac in network.factors])

    # 6. [n*m
    #      x11 ... x1m
    #       .  .    .
    #      xn1 ... xnm]
    for fac in network.factors:
        file.write('\n')
        file.write('{}\n'.format(fac.table.size))
        rows = fac.table.reshape(-1, fac.nstates[-1]) if fac.names \
            else fac.table.reshape(1, 1)
        file.writelines([' {}\n'.format(
            ' '.join(['{:.8f}'.format(param) for param in row]))
            for row in rows])

    # Final newline.
    file.write('\n')


def read_evidence(evidence_file):
    '''
    Parse an evidence file of the form NUM_OBSERVED VAR1 VALUE1 ...

    :return dict: evidence variables and their values
    '''

    data = evidence_file.read().replace('\n', ' ').strip().split()
    if not data:
        return {}
    num_observed = int(data[0])
    if len(data) != (2 * num_observed) + 1:
        raise ValueError("Evidence file is malformed; expecting\n"
                         "NUM_OBSERVED VAR1_NAME VAR1_VALUE ...")
    return dict((int(var), int(val))
                for var, val in zip(data[1::2], data[2::2]))


def with_evidence(network, evidence_file):
    '''
    Condition network using the given evidence file.

    :return tuple[mrf.Network, dict]: network clamped to the evidence and a dict
    of the evidence variables and their values
    '''

    evidence = read_evidence(evidence_file)
    return network.given(evidence), evidence
