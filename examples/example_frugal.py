"""
Compare exact MAP, Annealed MAP and the Most Frugal Explanation on the UAI
networks in the data directory, and test which intermediate variables the
exact MAP is independent of.

Every network.uai needs a network.uai.evid file next to it. The first two
variables are the hypothesis.
"""
import logging
import os

import frugal

__SCRIPT_DIR = os.path.dirname(__file__)
DATA_DIR = os.path.join(__SCRIPT_DIR, 'data')

logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s %(name)s %(levelname)s %(message)s')

for path in (os.path.join(DATA_DIR, filename)
             for filename in sorted(os.listdir(DATA_DIR))
             if filename.endswith('.uai')):
    with open(path, 'r') as uaifile:
        network = frugal.uai.load(uaifile)
    with open('{}.evid'.format(path), 'r') as evidfile:
        evidence = frugal.uai.read_evidence(evidfile)

    hypothesis = network.names[:2]
    intermediate = frugal.intermediate_vars(network, hypothesis, evidence)
    print(os.path.basename(path))
    for algorithm in ('map', 'annealed', 'mfe'):
        config = frugal.Config(algorithm, hypothesis, evidence=evidence,
                               irrelevant=intermediate[-1:],
                               cutoff_time=10, seed=0)
        print("  {}: {}".format(algorithm,
                                frugal.run.run(network, config)))
    for algorithm in ('weak', 'strong'):
        config = frugal.Config(algorithm, hypothesis, evidence=evidence,
                               test_vars=intermediate, max_indep=True)
        print("  maximum {} independent set: {}".format(
            algorithm, frugal.run.run(network, config)))
