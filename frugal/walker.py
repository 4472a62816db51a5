'''
walker - Enumerate and sample joint states of bounded discrete variables.

A joint state is a list of per-variable states; nstates holds the
cardinality of each position. One position may be skipped: it keeps its
value and takes no part in the enumeration.
'''
import functools
import operator


def iterate(states, nstates, skip=None):
    '''
    Advance states to the next joint state by a mixed-radix increment that
    runs from the last position to the first. After the last joint state the
    positions wrap around to all zeros.

    Parameters
    ----------
    states : list of int
        Current joint state, updated in place.
    nstates : list of int
        Cardinality of each position.
    skip : int
        Position that is never incremented, or None.
    Returns
    -------
    states : list of int
        The updated joint state.
    '''
    for dim in reversed(range(len(states))):
        if dim == skip:
            continue
        if states[dim] < nstates[dim] - 1:
            states[dim] += 1
            break
        # Overflow; reset this position and carry into the next one.
        states[dim] = 0
    return states


def random_sample(states, nstates, rng, skip=None):
    '''
    Draw every non-skipped position of states independently and uniformly,
    in place. The draws are uniform per variable, not proportional to any
    joint distribution.
    '''
    for dim in reversed(range(len(states))):
        if dim == skip:
            continue
        states[dim] = int(rng.integers(0, nstates[dim]))
    return states


def num_joint_states(nstates, skip=None):
    ''' Number of joint states, not counting the skipped position. '''
    return functools.reduce(
        operator.mul,
        (n for dim, n in enumerate(nstates) if dim != skip), 1)


def joint_states(nstates, skip=None, start=None):
    '''
    Generate every joint state once, as tuples, starting from start (all zeros
    by default). The skipped position keeps its starting value.
    '''
    states = list(start) if start is not None else [0] * len(nstates)
    for _ in range(num_joint_states(nstates, skip)):
        yield tuple(states)
        iterate(states, nstates, skip)
