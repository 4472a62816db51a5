'''
frugal - Approximate MAP explanations and MAP-independence tests for
discrete graphical models.
'''
from frugal.mrf import Factor, Network, network_to_mrf
from frugal.ve import (condition, condition_eliminate, eliminate,
                       elimination_order, greedy_ordering, map_assignment,
                       marginal, min_fill, mpe)
from frugal.oracle import (EliminationOracle, intermediate_vars,
                           local_prior_map, prior_map)
from frugal.annealing import AnnealedMapSearch, annealed_map, specific_heat
from frugal.relevance import RelevancePartition, partition_relevance
from frugal.mfe import most_frugal_explanation
from frugal.independence import (is_strong_map_independent,
                                 is_weak_map_independent,
                                 max_strong_map_indep, max_weak_map_indep,
                                 strong_map_indep_measure,
                                 weak_map_indep_measure)
from frugal.run import Config
from frugal import uai

__version__ = '0.1'
