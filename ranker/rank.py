"""
rank.py - damped power iteration over a SkillGraph.

Each step:
    leak   = alpha * (mass currently held by dangling nodes)
    new[t] = sum_s alpha * old[s] * p(s -> t) + (1 - alpha) / N + leak / N
and the loop stops once the L1 distance between successive vectors is <= epsilon.
"""
import math
import logging

import numpy as np

from ranker.config import DEFAULT_CONF
from ranker.errors import ConvergenceError, EmptyGraphError, InvalidParameterError

logger = logging.getLogger(__name__)


def _check_params(alpha, epsilon, max_iter):
    if isinstance(alpha, bool) or not isinstance(alpha, (int, float)) or not math.isfinite(alpha) \
            or not 0.0 <= alpha <= 1.0:
        raise InvalidParameterError(f"alpha must be in [0, 1], got {alpha!r}")
    if isinstance(epsilon, bool) or not isinstance(epsilon, (int, float)) or not math.isfinite(epsilon) \
            or epsilon <= 0:
        raise InvalidParameterError(f"epsilon must be a positive number, got {epsilon!r}")
    if max_iter is not None and (isinstance(max_iter, bool) or not isinstance(max_iter, int) or max_iter < 1):
        raise InvalidParameterError(f"max_iter must be a positive integer or None, got {max_iter!r}")


def power_iterate(rows, cols, probs, dangling, alpha, epsilon, max_iter=None):
    """
    Run the iteration on index-space arrays.
    Returns (ranks, iterations, delta).
    """
    n = dangling.shape[0]
    inverse = 1.0 / n
    weights = np.full(n, inverse)
    flow = alpha * probs

    iterations = 0
    delta = 1.0
    while True:
        previous = weights
        leak = alpha * previous[dangling].sum()

        weights = np.zeros(n)
        np.add.at(weights, cols, flow * previous[rows])
        weights += (1.0 - alpha) * inverse + leak * inverse

        delta = float(np.abs(weights - previous).sum())
        iterations += 1
        logger.debug("iteration %d: delta=%.3e", iterations, delta)
        if delta <= epsilon:
            break
        if max_iter is not None and iterations >= max_iter:
            raise ConvergenceError(iterations, delta)
    return weights, iterations, delta


def rank(graph, alpha=None, epsilon=None, on_result=None, max_iter=None):
    """
    Compute the stationary rank of every node in `graph`.

    alpha is the damping factor (usually 0.85), epsilon the L1 convergence
    threshold. Runs as many iterations as needed unless max_iter is given.
    Each node's `weight` is set to its final rank, `on_result(id, rank)` is
    called once per node in insertion order, and {id: rank} is returned.
    Stored edge weights are left as they were.
    """
    return RankEngine(alpha, epsilon, max_iter).rank(graph, on_result)


class RankEngine:
    """Holds ranking parameters; remembers iterations and delta of the last run."""

    def __init__(self, alpha=None, epsilon=None, max_iter=None):
        self.alpha = DEFAULT_CONF["alpha"] if alpha is None else alpha
        self.epsilon = DEFAULT_CONF["epsilon"] if epsilon is None else epsilon
        self.max_iter = max_iter
        _check_params(self.alpha, self.epsilon, self.max_iter)
        self.iterations = 0
        self.delta = None

    @classmethod
    def from_config(cls, conf):
        return cls(alpha=conf.get("alpha"), epsilon=conf.get("epsilon"), max_iter=conf.get("max_iter"))

    def rank(self, graph, on_result=None):
        if len(graph) == 0:
            raise EmptyGraphError("cannot rank an empty graph")
        rows, cols, probs, dangling = graph.adjacency_arrays()
        try:
            weights, self.iterations, self.delta = power_iterate(
                rows, cols, probs, dangling, float(self.alpha), float(self.epsilon), self.max_iter)
        except ConvergenceError as e:
            self.iterations, self.delta = e.iterations, e.delta
            raise
        logger.info("ranked %d nodes in %d iterations (delta=%.3e)", len(graph), self.iterations, self.delta)

        result = {}
        for nid, w in zip(graph.node_ids(), weights.tolist()):
            graph.node(nid).weight = w
            result[nid] = w
            if on_result is not None:
                on_result(nid, w)
        return result
